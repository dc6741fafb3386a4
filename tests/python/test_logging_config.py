import logging

from aviary.logging_config import UVICORN_LOGGERS, configure_logging, resolve_level


def test_level_prefers_argument_then_environment(monkeypatch):
    monkeypatch.setenv("AVIARY_LOG_LEVEL", "warning")
    assert resolve_level("debug") == "DEBUG"
    assert resolve_level() == "WARNING"
    monkeypatch.delenv("AVIARY_LOG_LEVEL")
    assert resolve_level() == "INFO"


def test_headless_leaves_uvicorn_alone():
    access = logging.getLogger("uvicorn.access")
    access.setLevel(logging.CRITICAL)
    logger = configure_logging(level="debug", include_uvicorn=False)
    assert logger.name == "aviary"
    assert logger.level == logging.DEBUG
    assert access.level == logging.CRITICAL

    configure_logging(level="error")
    assert all(logging.getLogger(name).level == logging.ERROR for name in UVICORN_LOGGERS)
