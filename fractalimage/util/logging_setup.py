import contextlib
import logging
import logging.handlers
import multiprocessing as mp
from typing import Iterator, Optional

_LOGGER_NAME = "fractalimage"

def get_logger() -> logging.Logger:
    return logging.getLogger(_LOGGER_NAME)

def _build_formatter() -> logging.Formatter:
    return logging.Formatter(
        fmt="%(asctime)s.%(msecs)03dZ %(processName)s %(levelname)s %(name)s - %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

def _reset_handlers(logger: logging.Logger, level: int, *, close: bool) -> None:
    logger.setLevel(level)
    logger.propagate = False
    for h in list(logger.handlers):
        logger.removeHandler(h)
        if close:
            h.close()

def configure_root_logging(
    *,
    level: int = logging.INFO,
    console: bool = True,
    log_file: Optional[str] = None,
    rotate_bytes: int = 5 * 1024 * 1024,
    rotate_count: int = 5,
) -> logging.Logger:
    logger = get_logger()
    _reset_handlers(logger, level, close=True)
    fmt = _build_formatter()
    if console:
        ch = logging.StreamHandler()
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

@contextlib.contextmanager
def queue_logging(listener_logger: logging.Logger) -> Iterator[mp.Queue]:
    """Yield a queue that worker processes log into; records are handed to
    the handlers of ``listener_logger`` until the block exits."""
    queue: mp.Queue = mp.Queue(-1)
    listener = logging.handlers.QueueListener(queue, *listener_logger.handlers, respect_handler_level=True)
    listener.start()
    try:
        yield queue
    finally:
        listener.stop()

def configure_worker_logging(queue: mp.Queue, *, level: int = logging.INFO) -> None:
    logger = get_logger()
    # Handlers inherited from a forked parent belong to the parent.
    _reset_handlers(logger, level, close=False)
    qh = logging.handlers.QueueHandler(queue)
    qh.setLevel(level)
    logger.addHandler(qh)
