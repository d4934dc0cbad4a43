# smash_assistant/backends/debug.py
"""提供一个用于开发和测试的调试后端。"""

import asyncio
from collections.abc import Sequence
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from smash_assistant.backends.base import BaseBackend, BaseBackendConfig
from smash_assistant.core.exceptions import BackendError
from smash_assistant.core.types import (
    AnalysisChunk,
    AnalysisResult,
    ContextType,
    DictionaryDefinition,
    DictionaryEntry,
    DictionaryResult,
    Message,
    QuickLookupResult,
)


class DebugBackendConfig(BaseSettings, BaseBackendConfig):
    """Debug 后端的配置模型。"""

    model_config = SettingsConfigDict(env_prefix="SMASH_DEBUG_", extra="ignore")

    mode: str = Field(default="SUCCESS", description="SUCCESS or FAIL")
    fail_on_text: Optional[str] = Field(default=None)
    latency: float = Field(default=0.0, ge=0)


class DebugBackend(BaseBackend[DebugBackendConfig]):
    """一个返回确定性结果的调试后端实现。"""

    CONFIG_MODEL = DebugBackendConfig
    VERSION = "1.0.0"

    async def _simulate(self, text: str) -> None:
        await asyncio.sleep(self.config.latency)
        if self.config.mode == "FAIL":
            raise BackendError("DebugBackend is in FAIL mode.")
        if self.config.fail_on_text and text == self.config.fail_on_text:
            raise BackendError(f"模拟失败：检测到配置的文本 '{text}'")

    async def _analyze_sentence(self, sentence: str) -> AnalysisResult:
        await self._simulate(sentence)
        return AnalysisResult(
            english_sentence=sentence,
            chinese_translation=f"Translated({sentence})",
            chunks=[AnalysisChunk(text=part) for part in sentence.split()],
        )

    async def _quick_lookup(
        self, word: str, context: str, source_url: Optional[str]
    ) -> QuickLookupResult:
        await self._simulate(word)
        return QuickLookupResult(
            word=word,
            context_meaning=f"Meaning({word})",
            explanation=f"'{word}' in: {context}",
            url=source_url,
        )

    async def _lookup_word(self, word: str) -> DictionaryResult:
        await self._simulate(word)
        return DictionaryResult(
            word=word,
            entries=[
                DictionaryEntry(
                    part_of_speech="unknown",
                    definitions=[DictionaryDefinition(meaning=f"Meaning({word})")],
                )
            ],
        )

    async def _chat_reply(
        self,
        history: Sequence[Message],
        context: Optional[str],
        user_message: str,
        context_type: ContextType,
    ) -> str:
        await self._simulate(user_message)
        return f"Reply({user_message}) [{context_type.value}: {context}]"
