# smash_assistant/core/__init__.py
"""
本核心包定义了 smash-assistant 中最基础、最稳定的构建块。

这里包含了系统的核心数据类型、外部服务接口协议和自定义异常，它们共同构成了
整个库的“契约”。所有其他模块都依赖于此核心包，但本包不依赖于
项目中的任何其他模块。
"""

from .exceptions import (
    BackendError,
    BackendNotFoundError,
    ConfigurationError,
    SmashAssistantError,
)
from .interfaces import AssistantBackend
from .types import (
    AnalysisResult,
    ContextType,
    DictionaryResult,
    Message,
    MessageKind,
    MessageRole,
    QuickLookupResult,
    ResolvedContext,
    Thread,
    ThreadSeed,
    WritingResult,
)

__all__ = [
    # from exceptions.py
    "SmashAssistantError",
    "ConfigurationError",
    "BackendNotFoundError",
    "BackendError",
    # from interfaces.py
    "AssistantBackend",
    # from types.py
    "ContextType",
    "MessageRole",
    "MessageKind",
    "Message",
    "Thread",
    "ThreadSeed",
    "ResolvedContext",
    "AnalysisResult",
    "QuickLookupResult",
    "DictionaryResult",
    "WritingResult",
]
