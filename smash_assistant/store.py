# smash_assistant/store.py
"""
会话线程存储：所有线程的权威集合，以及“当前激活线程”指针。

线程与激活指针只能通过本模块暴露的操作修改（reducer 风格），
因此线程 id 唯一、至多一个激活线程等不变量在这里集中维护。所有操作都是同步的全函数，
不会向调用方抛出异常。
"""

from __future__ import annotations

import secrets
import time
from collections.abc import Callable, Sequence
from typing import Optional

import structlog

from smash_assistant.core.types import (
    ContextType,
    Message,
    MessageKind,
    Thread,
    ThreadSeed,
)
from smash_assistant.events import ChangeNotifier, Listener, StoreEvent, StoreEventType

logger = structlog.get_logger(__name__)

DEFAULT_WORD_THREAD_LOOKUP_LIMIT = 10


def generate_thread_id() -> str:
    """毫秒时间戳 + 随机后缀。"""
    return f"{int(time.time() * 1000):x}-{secrets.token_hex(4)}"


class ThreadStore:
    """进程内的会话存储。"""

    def __init__(
        self,
        notifier: ChangeNotifier | None = None,
        *,
        word_thread_lookup_limit: int = DEFAULT_WORD_THREAD_LOOKUP_LIMIT,
        id_factory: Callable[[], str] = generate_thread_id,
    ):
        self.notifier = notifier or ChangeNotifier()
        self.word_thread_lookup_limit = word_thread_lookup_limit
        self._id_factory = id_factory
        # 最新创建的线程排在最前
        self._order: list[str] = []
        self._threads: dict[str, Thread] = {}
        self._active_thread_id: Optional[str] = None

    # --- 只读接口 ---

    @property
    def threads(self) -> tuple[Thread, ...]:
        return tuple(self._threads[thread_id] for thread_id in self._order)

    @property
    def active_thread_id(self) -> Optional[str]:
        return self._active_thread_id

    @property
    def active_thread(self) -> Optional[Thread]:
        if self._active_thread_id is None:
            return None
        return self._threads.get(self._active_thread_id)

    def get(self, thread_id: str) -> Optional[Thread]:
        return self._threads.get(thread_id)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.notifier.subscribe(listener)

    def __len__(self) -> int:
        return len(self._threads)

    def __contains__(self, thread_id: object) -> bool:
        return thread_id in self._threads

    # --- 变更操作 ---

    def _next_id(self) -> str:
        thread_id = self._id_factory()
        while thread_id in self._threads:
            thread_id = self._id_factory()
        return thread_id

    def create_thread(self, seed: ThreadSeed) -> Thread:
        """创建新线程，放在排序最前，并设为激活线程。"""
        thread = Thread(
            id=self._next_id(),
            title=seed.title,
            messages=tuple(seed.initial_messages),
            context=seed.context,
            context_type=seed.context_type,
        )
        self._threads[thread.id] = thread
        self._order.insert(0, thread.id)
        self._active_thread_id = thread.id
        logger.debug(
            "线程已创建",
            thread_id=thread.id,
            context_type=thread.context_type.value,
        )
        self.notifier.notify(
            StoreEvent(event_type=StoreEventType.THREAD_CREATED, thread_id=thread.id)
        )
        return thread

    def append_messages(self, thread_id: str, new_messages: Sequence[Message]) -> None:
        """
        用 `new_messages` 整体替换指定线程的消息序列。

        调用方负责传入“已有消息 + 新消息”（或在丢弃占位消息时传入替换后的序列）。
        线程不存在时静默忽略。
        """
        thread = self._threads.get(thread_id)
        if thread is None:
            logger.debug("目标线程不存在，忽略本次写入", thread_id=thread_id)
            return
        self._threads[thread_id] = thread.model_copy(
            update={"messages": tuple(new_messages)}
        )
        self.notifier.notify(
            StoreEvent(event_type=StoreEventType.MESSAGES_REPLACED, thread_id=thread_id)
        )

    def select_thread(self, thread_id: Optional[str]) -> None:
        """设置激活指针；传入 None 清除它。未知 id 不做任何修改。"""
        if thread_id is not None and thread_id not in self._threads:
            logger.debug("尝试选择不存在的线程，已忽略", thread_id=thread_id)
            return
        if thread_id == self._active_thread_id:
            return
        self._active_thread_id = thread_id
        self.notifier.notify(
            StoreEvent(event_type=StoreEventType.ACTIVE_CHANGED, thread_id=thread_id)
        )

    def reuse_or_create_word_thread(
        self,
        context: Optional[str],
        initial_messages: Sequence[Message] = (),
        title: Optional[str] = None,
    ) -> str:
        """
        单词线程复用策略。

        当前激活线程是单词类型，且其中快速查词结果少于上限（默认 10 条）时，
        将 `initial_messages` 追加到该线程；否则新建一个单词线程。

        Returns:
            接收后续结果的线程 id（即关联 id）。

        """
        active = self.active_thread
        if (
            active is not None
            and active.context_type is ContextType.WORD
            and active.count_kind(MessageKind.QUICK_LOOKUP_RESULT)
            < self.word_thread_lookup_limit
        ):
            if initial_messages:
                self.append_messages(active.id, [*active.messages, *initial_messages])
            return active.id

        thread = self.create_thread(
            ThreadSeed(
                title=title if title is not None else (context or ""),
                context=context,
                context_type=ContextType.WORD,
                initial_messages=tuple(initial_messages),
            )
        )
        return thread.id
