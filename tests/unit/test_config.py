# tests/unit/test_config.py
"""测试 `AssistantConfig` 的默认值、环境变量覆盖与校验。"""

import pytest
from pydantic import ValidationError

from smash_assistant.cache import CacheType
from smash_assistant.config import AssistantConfig, BackendName


def test_defaults() -> None:
    config = AssistantConfig()
    assert config.backend is BackendName.HTTP
    assert config.title_max_chars == 30
    assert config.word_thread_lookup_limit == 10
    assert config.quick_lookup_key_separator == "::"
    assert config.cache_config.cache_type is CacheType.UNBOUNDED
    assert config.logging.format == "console"


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SMASH_BACKEND", "debug")
    monkeypatch.setenv("SMASH_WORD_THREAD_LOOKUP_LIMIT", "3")
    monkeypatch.setenv("SMASH_CACHE_CONFIG__CACHE_TYPE", "lru")
    monkeypatch.setenv("SMASH_LOGGING__FORMAT", "json")

    config = AssistantConfig()

    assert config.backend is BackendName.DEBUG
    assert config.word_thread_lookup_limit == 3
    assert config.cache_config.cache_type is CacheType.LRU
    assert config.logging.format == "json"


@pytest.mark.parametrize(
    "overrides",
    [
        {"quick_lookup_key_separator": ""},
        {"title_max_chars": 0},
        {"word_thread_lookup_limit": 0},
    ],
)
def test_invalid_values_are_rejected(overrides: dict) -> None:
    with pytest.raises(ValidationError):
        AssistantConfig(**overrides)
