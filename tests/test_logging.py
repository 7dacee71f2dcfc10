import logging

from app.core import config, errors
from app.core.logging import ContextFilter, LogContext, get_logger

logger = get_logger("tests")


def test_loggers_live_under_relay_namespace():
    assert logger.name == "relay.tests"
    assert config.logger.name == "relay.app.core.config"
    assert errors.logger.name == "relay.app.core.errors"


def test_log_context_fields_apply_only_inside_block(caplog):
    caplog.handler.addFilter(ContextFilter())
    caplog.set_level(logging.INFO, logger="relay")

    with LogContext(phone="********2671", dest="https://live.wati.test"):
        logger.info("inside")
        with LogContext(status=502):
            logger.info("nested")
    logger.info("outside")

    inside, nested, outside = caplog.records
    assert inside.phone == "********2671"
    assert inside.dest == "https://live.wati.test"
    assert not hasattr(inside, "status")
    assert nested.status == 502
    assert nested.dest == "https://live.wati.test"
    assert not hasattr(outside, "phone")
    assert not hasattr(outside, "dest")


def test_explicit_extra_wins_over_context(caplog):
    caplog.handler.addFilter(ContextFilter())
    caplog.set_level(logging.INFO, logger="relay")

    with LogContext(status=200):
        logger.info("override", extra={"status": 502})

    assert caplog.records[-1].status == 502
