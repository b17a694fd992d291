import logging

from configs.validate import validate
from storyframe.io.log import VERBOSE
from storyframe.io.redact import REDACTED
from tests.helpers.configs import make_cfg, make_cfg_with_stability

LOGGER = "storyframe.validate"


def _records(caplog, level):
    return [r for r in caplog.records if r.name == LOGGER and r.levelno == level]


def test_log_mode_returns_empty_and_logs_each_violation(caplog):
    caplog.set_level(logging.DEBUG, logger=LOGGER)
    cfg = make_cfg()
    cfg["logs"]["level"] = "trace"
    cfg["image"]["interval"] = 2

    assert validate(cfg) == []

    errors = [r.getMessage() for r in _records(caplog, logging.ERROR)]
    assert errors[0] == "2 validation error(s)"
    assert errors[1].startswith("logs.level: ")
    assert errors[2] == "image.interval: number must be greater than or equal to 10"
    assert len(errors) == 3


def test_log_mode_dumps_redacted_config_even_when_valid(caplog):
    caplog.set_level(logging.DEBUG, logger=LOGGER)
    cfg = make_cfg_with_stability()

    assert validate(cfg) == []

    assert _records(caplog, logging.ERROR) == []
    dumps = [r.getMessage() for r in _records(caplog, VERBOSE)]
    assert len(dumps) == 1
    assert REDACTED in dumps[0]
    assert "sk-test" not in dumps[0]
    assert "sk-stability" not in dumps[0]
    assert "stable-diffusion-v1-5" in dumps[0]


def test_return_mode_never_logs(caplog):
    caplog.set_level(logging.DEBUG, logger=LOGGER)
    cfg = make_cfg()
    cfg["logs"]["level"] = "trace"

    assert validate(cfg, return_errors=True) == ["logs.level: invalid enum value. "
        "expected 'silent' | 'error' | 'warn' | 'info' | 'http' | 'verbose' | 'debug' | 'silly', received 'trace'"]
    assert [r for r in caplog.records if r.name == LOGGER] == []


def test_explicit_logger_is_used(caplog):
    caplog.set_level(logging.DEBUG, logger="storyframe.boot")
    cfg = make_cfg()
    cfg["telemetry"] = "no"
    validate(cfg, logger=logging.getLogger("storyframe.boot"))
    msgs = [r.getMessage() for r in caplog.records if r.name == "storyframe.boot"]
    assert "telemetry: expected boolean, received string" in msgs
