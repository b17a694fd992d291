from __future__ import annotations

from storyframe.io.config import Configuration
from storyframe.io.redact import REDACTED, is_secret_key, redact


def test_redacts_secret_keys_at_any_depth():
    cfg = {
        "openai": {"key": "sk-1", "summary": {"model": "m"}},
        "stabilityai": {"key": "sk-2", "image": {"engine_id": "e"}},
        "list": [{"api_key": "x"}, "plain"],
    }
    out = redact(cfg)
    assert out["openai"]["key"] == REDACTED
    assert out["stabilityai"]["key"] == REDACTED
    assert out["list"][0]["api_key"] == REDACTED
    assert out["openai"]["summary"] == {"model": "m"}
    assert out["list"][1] == "plain"
    # input untouched
    assert cfg["openai"]["key"] == "sk-1"


def test_empty_secret_stays_visible():
    assert redact({"key": ""}) == {"key": ""}
    assert redact({"key": None}) == {"key": None}


def test_accepts_configuration():
    out = redact(Configuration(data={"openai": {"key": "sk"}}))
    assert out == {"openai": {"key": REDACTED}}


def test_secret_key_names():
    assert is_secret_key("key")
    assert is_secret_key("Access_Token")
    assert is_secret_key("client_secret")
    assert not is_secret_key("engine_id")
    assert not is_secret_key("keyboard")
    assert not is_secret_key(3)
