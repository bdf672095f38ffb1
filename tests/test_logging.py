"""Tests for the loguru setup."""

from funcpack.utils.logging import configure_file_logging, get_request_id, logger


def test_file_logging(tmp_path):
    handler_id = configure_file_logging(tmp_path / "logs")
    try:
        logger.debug("walking fn.js")
    finally:
        logger.remove(handler_id)

    content = (tmp_path / "logs" / "funcpack.log").read_text(encoding="utf-8")
    assert "walking fn.js" in content
    assert "DEBUG" in content


def test_request_id_is_stable():
    assert get_request_id() == get_request_id()
    assert get_request_id()
