# smash_assistant/backends/base.py
"""
本模块定义了所有外部 AI 服务适配器必须继承的抽象基类（ABC）。

子类只需实现以下划线开头的执行方法；公共方法作为模板方法，
统一施加并发限制。适配器不做重试：失败直接以 `BackendError` 抛出，
由调度器转换为可见的助手消息。
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from smash_assistant.core.types import (
    AnalysisResult,
    ContextType,
    DictionaryResult,
    Message,
    QuickLookupResult,
)

_ConfigType = TypeVar("_ConfigType", bound="BaseBackendConfig")
_T = TypeVar("_T")


class BaseBackendConfig(BaseModel):
    """所有后端配置模型的基类，提供通用的并发控制选项。"""

    max_concurrency: int | None = Field(
        default=None, description="最大并发请求数", gt=0
    )


class BaseBackend(ABC, Generic[_ConfigType]):
    """外部 AI 服务的纯异步抽象基类，内置并发控制。"""

    CONFIG_MODEL: type[_ConfigType]
    VERSION: str = "1.0.0"

    def __init__(self, config: _ConfigType):
        self.config = config
        self._concurrency_semaphore: asyncio.Semaphore | None = None
        if config.max_concurrency:
            self._concurrency_semaphore = asyncio.Semaphore(config.max_concurrency)

    @property
    def name(self) -> str:
        """从类名自动推断后端的名称。"""
        return self.__class__.__name__.removesuffix("Backend").lower()

    async def close(self) -> None:
        """后端的异步关闭钩子，用于安全释放资源。"""

    async def _guarded(self, call: Callable[[], Awaitable[_T]]) -> _T:
        if self._concurrency_semaphore:
            async with self._concurrency_semaphore:
                return await call()
        return await call()

    # --- [子类实现] ---

    @abstractmethod
    async def _analyze_sentence(self, sentence: str) -> AnalysisResult: ...

    @abstractmethod
    async def _quick_lookup(
        self, word: str, context: str, source_url: Optional[str]
    ) -> QuickLookupResult: ...

    @abstractmethod
    async def _lookup_word(self, word: str) -> DictionaryResult: ...

    @abstractmethod
    async def _chat_reply(
        self,
        history: Sequence[Message],
        context: Optional[str],
        user_message: str,
        context_type: ContextType,
    ) -> str: ...

    # --- [公共 API] ---

    async def analyze_sentence(self, sentence: str) -> AnalysisResult:
        return await self._guarded(lambda: self._analyze_sentence(sentence))

    async def quick_lookup(
        self, word: str, context: str, source_url: Optional[str] = None
    ) -> QuickLookupResult:
        return await self._guarded(
            lambda: self._quick_lookup(word, context, source_url)
        )

    async def lookup_word(self, word: str) -> DictionaryResult:
        return await self._guarded(lambda: self._lookup_word(word))

    async def chat_reply(
        self,
        history: Sequence[Message],
        context: Optional[str],
        user_message: str,
        context_type: ContextType,
    ) -> str:
        return await self._guarded(
            lambda: self._chat_reply(history, context, user_message, context_type)
        )
