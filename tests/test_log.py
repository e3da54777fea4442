import logging

from y2m_device_store.log import setup_logger


def test_setup_logger_writes_to_rotating_file(tmp_path):
    logger = setup_logger("y2m_device_store.test", "store.log", logging.DEBUG, logs_dir=str(tmp_path))
    setup_logger("y2m_device_store.test", "store.log", logging.DEBUG, logs_dir=str(tmp_path))
    assert len(logger.handlers) == 1

    logging.getLogger("y2m_device_store.test.child").info("configuration loaded: %d device(s)", 3)
    for h in logger.handlers:
        h.flush()
    text = (tmp_path / "store.log").read_text(encoding="utf-8")
    assert "[INFO] [y2m_device_store.test.child] configuration loaded: 3 device(s)" in text

    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
