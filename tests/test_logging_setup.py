import logging
import logging.handlers

from fractalimage.util.logging_setup import (
    configure_root_logging,
    configure_worker_logging,
    get_logger,
    queue_logging,
)


def test_root_logging_writes_file(tmp_path):
    log_file = tmp_path / "render.log"
    logger = configure_root_logging(level=logging.DEBUG, console=False, log_file=str(log_file))
    logger.info("hello %s", "file")
    for h in logger.handlers:
        h.flush()

    assert logger is get_logger()
    assert logger.propagate is False
    assert "INFO fractalimage - hello file" in log_file.read_text(encoding="utf-8")
    configure_root_logging(console=False, log_file=None)


def test_queue_logging_forwards_records(tmp_path):
    log_file = tmp_path / "queued.log"
    listener_logger = configure_root_logging(level=logging.INFO, console=False, log_file=str(log_file))
    handlers = list(listener_logger.handlers)

    with queue_logging(listener_logger) as queue:
        configure_worker_logging(queue, level=logging.INFO)
        assert isinstance(get_logger().handlers[0], logging.handlers.QueueHandler)
        get_logger().warning("from worker %s", 3)

    for h in handlers:
        h.flush()
    assert "WARNING fractalimage - from worker 3" in log_file.read_text(encoding="utf-8")
    configure_root_logging(console=False, log_file=None)
    for h in handlers:
        h.close()
