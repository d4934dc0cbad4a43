# smash_assistant/config.py

import enum
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from smash_assistant.cache import CacheConfig


class BackendName(str, enum.Enum):
    HTTP = "http"
    DEBUG = "debug"


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: Literal["json", "console"] = "console"


class AssistantTexts(BaseModel):
    """面板中由核心生成的占位与错误文本。`{word}` 会被替换为查询的单词。"""

    analyzing: str = "正在分析句子结构..."
    looking_up: str = "正在查询 “{word}”..."
    dictionary_looking_up: str = "正在查词典 “{word}”..."
    video_paused: str = "视频已暂停，分析完成后可继续播放。"
    chat_failed: str = "抱歉，连接出了点问题，请稍后再试。"
    analysis_failed: str = "分析失败，请稍后再试。"
    lookup_failed: str = "查询 “{word}” 失败，请稍后再试。"


class AssistantConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SMASH_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    backend: BackendName = BackendName.HTTP
    backend_configs: dict[str, Any] = Field(default_factory=dict)
    title_max_chars: int = Field(default=30, gt=0)
    word_thread_lookup_limit: int = Field(default=10, gt=0)
    quick_lookup_key_separator: str = "::"

    cache_config: CacheConfig = Field(default_factory=CacheConfig)
    texts: AssistantTexts = Field(default_factory=AssistantTexts)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("quick_lookup_key_separator")
    @classmethod
    def validate_separator(cls, v: str) -> str:
        if not v:
            raise ValueError("quick_lookup_key_separator 不能为空，否则 'ab'+'c' 与 'a'+'bc' 会冲突")
        return v
