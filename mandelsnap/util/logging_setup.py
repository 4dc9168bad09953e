import logging
import logging.handlers
import multiprocessing as mp
import sys
from contextlib import contextmanager
from typing import Iterator, Optional

_LOGGER_NAME = "mandelsnap"

def get_logger() -> logging.Logger:
    return logging.getLogger(_LOGGER_NAME)

def build_formatter(*, show_process: bool = False) -> logging.Formatter:
    # process names only tell records apart when render workers are logging too
    process = " %(processName)s" if show_process else ""
    return logging.Formatter(
        fmt=f"%(asctime)s.%(msecs)03d{process} %(levelname)s %(name)s - %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

def _reset_handlers(logger: logging.Logger) -> None:
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

def configure_root_logging(
    *,
    level: int = logging.INFO,
    console: bool = True,
    log_file: Optional[str] = None,
    show_process: bool = False,
    rotate_bytes: int = 5 * 1024 * 1024,
    rotate_count: int = 5,
) -> logging.Logger:
    """Attach stdout and (optionally) rotating-file handlers to the package logger."""
    logger = get_logger()
    logger.setLevel(level)
    logger.propagate = False
    _reset_handlers(logger)
    fmt = build_formatter(show_process=show_process)
    if console:
        ch = logging.StreamHandler(sys.stdout)
        ch.setLevel(level)
        ch.setFormatter(fmt)
        logger.addHandler(ch)
    if log_file:
        fh = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=rotate_bytes, backupCount=rotate_count, encoding="utf-8"
        )
        fh.setLevel(level)
        fh.setFormatter(fmt)
        logger.addHandler(fh)
    return logger

def configure_worker_logging(queue: mp.Queue, *, level: int = logging.INFO) -> None:
    """Route a render worker's records to the parent's listener."""
    logger = get_logger()
    logger.setLevel(level)
    logger.propagate = False
    _reset_handlers(logger)
    qh = logging.handlers.QueueHandler(queue)
    qh.setLevel(level)
    logger.addHandler(qh)

@contextmanager
def logging_session(
    *,
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    show_process: bool = False,
) -> Iterator[mp.Queue]:
    """
    Configure the package logger for one run and yield the queue render
    workers should log into. The listener is stopped and the handlers are
    closed on exit.
    """
    logger = configure_root_logging(level=level, console=True, log_file=log_file, show_process=show_process)
    queue: mp.Queue = mp.Queue(-1)
    listener = logging.handlers.QueueListener(queue, *logger.handlers, respect_handler_level=True)
    listener.start()
    try:
        yield queue
    finally:
        listener.stop()
        queue.close()
        _reset_handlers(logger)
