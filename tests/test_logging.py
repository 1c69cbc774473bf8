import logging

from chatapp.utils.logging import LOG_FORMAT, configure_logging


def test_third_party_loggers_stay_quiet_at_debug():
    configure_logging("debug")
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("google_genai").level == logging.WARNING


def test_stricter_level_applies_to_third_party_loggers():
    configure_logging("ERROR")
    assert logging.getLogger("httpx").level == logging.ERROR


def test_format_names_the_emitting_module():
    assert "%(name)s" in LOG_FORMAT
