# smash_assistant/events.py
"""
定义会话存储与结果缓存发生变更时广播的事件，以及一个简单的同步订阅点。

展示层订阅这些事件以便重新渲染；事件本身不携带可变状态，
订阅者应通过存储的只读接口读取最新快照。
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from typing import Optional

import structlog
from pydantic import BaseModel, ConfigDict

logger = structlog.get_logger(__name__)


class StoreEventType(str, enum.Enum):
    THREAD_CREATED = "thread.created"
    MESSAGES_REPLACED = "thread.messages_replaced"
    ACTIVE_CHANGED = "thread.active_changed"
    CACHE_UPDATED = "cache.updated"


class StoreEvent(BaseModel):
    """一次变更的描述。"""

    model_config = ConfigDict(frozen=True)

    event_type: StoreEventType
    thread_id: Optional[str] = None
    cache_name: Optional[str] = None


Listener = Callable[[StoreEvent], None]


class ChangeNotifier:
    """在存储和缓存之间共享的变更通知点。"""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """注册一个监听器，返回用于取消订阅的函数。"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self, event: StoreEvent) -> None:
        # 监听器属于展示层，其异常不能中断存储的变更流程
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.error(
                    "变更监听器执行失败",
                    event_type=event.event_type.value,
                    exc_info=True,
                )
