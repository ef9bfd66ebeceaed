import pytest
from pydantic import ValidationError

from canvaschat.config import Settings, load_settings


def test_defaults():
    s = Settings()
    assert s.api_url == "http://localhost:11434"
    assert s.max_tokens == 2048
    assert s.user_highlight_color == "#FF5582A6"
    assert s.debug is False


def test_settings_are_frozen():
    s = Settings()
    with pytest.raises(ValidationError):
        s.model = "other"


@pytest.mark.parametrize("field,value", [
    ("max_tokens", 0),
    ("temperature", -0.1),
    ("top_p", 1.5),
    ("top_k", -1),
])
def test_invalid_values_rejected(field, value):
    with pytest.raises(ValidationError):
        Settings(**{field: value})


def test_load_settings_reads_env_then_overrides(monkeypatch):
    monkeypatch.setenv("CANVAS_CHAT_MODEL", "qwen2")
    monkeypatch.setenv("CANVAS_CHAT_MAX_TOKENS", "4096")
    monkeypatch.setenv("CANVAS_CHAT_DEBUG", "true")
    s = load_settings(max_tokens=100, system_prompt=None)
    assert s.model == "qwen2"
    assert s.max_tokens == 100
    assert s.debug is True
    assert s.system_prompt == "You are a helpful assistant."
