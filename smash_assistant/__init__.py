# smash_assistant/__init__.py
"""smash-assistant: 为多个学习界面共享的 AI 助手面板提供会话与结果缓存核心。

该模块提供多线程会话存储、上下文解析、结果缓存，以及把异步后端结果
路由回发起线程的请求调度器。
"""

__version__ = "0.4.0"

from .backends import create_backend
from .cache import CacheConfig, CacheType, ResultCache
from .config import AssistantConfig, BackendName
from .context import AssistantContext
from .core.types import ContextType, Message, MessageKind, MessageRole, Thread
from .dispatcher import AssistantDispatcher, RequestState
from .resolvers import Surface, resolve_context
from .store import ThreadStore

__all__ = [
    "__version__",
    "AssistantConfig",
    "AssistantContext",
    "AssistantDispatcher",
    "BackendName",
    "CacheConfig",
    "CacheType",
    "ContextType",
    "Message",
    "MessageKind",
    "MessageRole",
    "RequestState",
    "ResultCache",
    "Surface",
    "Thread",
    "ThreadStore",
    "create_backend",
    "resolve_context",
]
