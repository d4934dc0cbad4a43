# smash_assistant/core/interfaces.py
"""定义了会话核心所消费的外部 AI 服务的纯异步接口协议。"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from smash_assistant.core.types import (
        AnalysisResult,
        ContextType,
        DictionaryResult,
        Message,
        QuickLookupResult,
    )


class AssistantBackend(Protocol):
    """
    外部 AI 服务的边界契约。

    所有方法在失败时抛出 `BackendError`；传输方式与错误细节由实现类负责，
    调度器只关心成功或失败。
    """

    async def analyze_sentence(self, sentence: str) -> AnalysisResult:
        """对整句进行语法成分分析。"""
        ...

    async def quick_lookup(
        self, word: str, context: str, source_url: Optional[str] = None
    ) -> QuickLookupResult:
        """结合上下文查询单词释义。`source_url` 为不透明的来源信息，原样回传。"""
        ...

    async def lookup_word(self, word: str) -> DictionaryResult:
        """完整的词典查询。"""
        ...

    async def chat_reply(
        self,
        history: Sequence[Message],
        context: Optional[str],
        user_message: str,
        context_type: ContextType,
    ) -> str:
        """自由对话回复。"""
        ...

    async def close(self) -> None:
        """释放底层资源（如 HTTP 连接池）。"""
        ...
