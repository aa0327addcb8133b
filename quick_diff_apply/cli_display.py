import logging
import os
from datetime import datetime


# Package logger; handlers are attached by setup_logger()
log = logging.getLogger("quick_diff_apply")

_GREEN = "\033[32m"
_RED = "\033[31m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"


def setup_logger(log_dir: str = ".quickdiff/logs") -> logging.Logger:
    """Creates a file logger. All verbose output goes here.

    An empty *log_dir* disables the log file.  Calling this again reuses the
    handler for the same directory and replaces one for another directory.
    """
    log.setLevel(logging.DEBUG)
    target_dir = os.path.abspath(log_dir) if log_dir else None

    for handler in list(log.handlers):
        owner_dir = getattr(handler, "quickdiff_log_dir", None)
        if owner_dir is None:
            continue
        if owner_dir == target_dir:
            return log
        log.removeHandler(handler)
        handler.close()

    if target_dir is None:
        return log

    os.makedirs(target_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(target_dir, f"quickdiff_{timestamp}.log")

    # File handler gets every level
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s", datefmt="%H:%M:%S"
    ))
    fh.quickdiff_log_dir = target_dir
    log.addHandler(fh)

    return log


def show_info(message: str) -> None:
    log.info(message)
    print(f"  {message}")


def show_success(message: str) -> None:
    log.info(message)
    print(f"  {_GREEN}✔ {message}{_RESET}")


def show_warning(message: str) -> None:
    log.warning(message)
    print(f"  {_YELLOW}! {message}{_RESET}")


def show_error(message: str) -> None:
    log.error(message)
    print(f"  {_RED}✘ {message}{_RESET}")
