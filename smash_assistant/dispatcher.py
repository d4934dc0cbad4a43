# smash_assistant/dispatcher.py
"""
请求调度器：端到端编排一次助手动作。

每个动作在第一个挂起点之前同步地确定接收结果的线程 id（关联 id），
之后所有结果合并都只按这个 id 寻址，而不是重新读取“当前激活线程”。
用户在请求进行中切换界面、清除激活指针，结果依旧落回发起请求的线程。
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

import structlog

from smash_assistant.cache import (
    ResultCache,
    analysis_cache_key,
    quick_lookup_cache_key,
)
from smash_assistant.context import AssistantContext
from smash_assistant.core.types import (
    AnalysisResult,
    ContextType,
    Message,
    MessageKind,
    MessageRole,
    QuickLookupResult,
    ResolvedContext,
    ThreadSeed,
)
from smash_assistant.resolvers import clean_word, derive_title

if TYPE_CHECKING:
    from smash_assistant.config import AssistantTexts
    from smash_assistant.store import ThreadStore

logger = structlog.get_logger(__name__)


class RequestState(str, Enum):
    """单个在途请求的状态机：Issued → (CacheHit | Pending) → Resolved | Failed。"""

    ISSUED = "issued"
    CACHE_HIT = "cache_hit"
    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"


def _assistant_message(
    content: str, kind: MessageKind = MessageKind.PLAIN, payload: Any = None
) -> Message:
    return Message(
        role=MessageRole.ASSISTANT, content=content, kind=kind, payload=payload
    )


class AssistantDispatcher:
    """助手动作的唯一入口；存储与缓存只通过它们自己的操作被修改。"""

    def __init__(self, context: AssistantContext):
        self.ctx = context
        # 相同缓存键的在途请求共享一次后端调用
        self._inflight: dict[tuple[str, str], asyncio.Task[Any]] = {}

    @property
    def store(self) -> ThreadStore:
        return self.ctx.store

    @property
    def texts(self) -> AssistantTexts:
        return self.ctx.config.texts

    def _title(self, content: str) -> str:
        return derive_title(content, self.ctx.config.title_max_chars)

    # --- 导航 ---

    def switch_surface(self) -> None:
        """切换学习界面：清除激活线程，不修改任何已存储的线程。"""
        self.store.select_thread(None)

    def new_chat(self) -> None:
        self.store.select_thread(None)

    def select_thread(self, thread_id: str) -> None:
        self.store.select_thread(thread_id)

    # --- 结果合并 ---

    def _merge(
        self,
        correlation_id: str,
        message: Message,
        placeholder: Optional[Message] = None,
    ) -> None:
        """把结果写入关联线程；若给出占位消息，则在同一次整体替换中移除它。"""
        thread = self.store.get(correlation_id)
        if thread is None:
            logger.debug("关联线程已不存在，结果被丢弃", thread_id=correlation_id)
            return
        messages = [
            m
            for m in thread.messages
            if placeholder is None or m.id != placeholder.id
        ]
        messages.append(message)
        self.store.append_messages(correlation_id, messages)

    async def _shared_fetch(
        self,
        cache: ResultCache,
        key: str,
        call: Callable[[], Awaitable[Any]],
    ) -> Any:
        """执行后端调用并在成功后写入缓存；相同键的并发请求合并为一次调用。"""
        inflight_key = (cache.name, key)
        task = self._inflight.get(inflight_key)
        if task is None:

            async def fetch() -> Any:
                result = await call()
                cache.put(key, result)
                return result

            task = asyncio.ensure_future(fetch())
            self._inflight[inflight_key] = task

            def _forget(done: asyncio.Task[Any]) -> None:
                if self._inflight.get(inflight_key) is done:
                    del self._inflight[inflight_key]

            task.add_done_callback(_forget)
        else:
            logger.debug("复用在途请求", cache=cache.name, cache_key=key)
        return await asyncio.shield(task)

    async def _complete(
        self,
        *,
        operation: str,
        correlation_id: str,
        placeholder: Optional[Message],
        cache: Optional[ResultCache],
        key: Optional[str],
        cached: Any,
        call: Callable[[], Awaitable[Any]],
        to_message: Callable[[Any], Message],
        failure_text: str,
    ) -> str:
        log = logger.bind(operation=operation, thread_id=correlation_id)
        log.debug("请求已发出", request_state=RequestState.ISSUED.value)

        if cached is not None:
            self._merge(correlation_id, to_message(cached))
            log.info("命中缓存", request_state=RequestState.CACHE_HIT.value)
            return correlation_id

        log.debug("等待后端响应", request_state=RequestState.PENDING.value)
        try:
            if cache is not None and key is not None:
                result = await self._shared_fetch(cache, key, call)
            else:
                result = await call()
        except Exception:
            log.error("后端调用失败", request_state=RequestState.FAILED.value, exc_info=True)
            self._merge(correlation_id, _assistant_message(failure_text), placeholder)
            return correlation_id

        self._merge(correlation_id, to_message(result), placeholder)
        log.info("请求完成", request_state=RequestState.RESOLVED.value)
        return correlation_id

    # --- 助手动作 ---

    async def send_message(
        self, content: str, resolved_context: Optional[ResolvedContext] = None
    ) -> Optional[str]:
        """
        发送一条自由对话消息。

        没有激活线程时惰性地创建一个（标题取自消息内容，上下文取自
        `resolved_context`）；否则把用户消息追加到激活线程。AI 回复按关联 id
        写回，所以一次发送只会创建一个线程。

        Returns:
            关联 id；内容为空白时返回 None 且不做任何修改。

        """
        if not content.strip():
            return None

        user_message = Message(role=MessageRole.USER, content=content)
        active = self.store.active_thread
        if active is None:
            resolved = resolved_context or ResolvedContext(
                context_type=ContextType.SENTENCE
            )
            thread = self.store.create_thread(
                ThreadSeed(
                    title=self._title(content),
                    context=resolved.text,
                    context_type=resolved.context_type,
                    initial_messages=(user_message,),
                )
            )
        else:
            self.store.append_messages(active.id, [*active.messages, user_message])
            thread = self.store.get(active.id) or active

        correlation_id = thread.id
        history = thread.messages

        return await self._complete(
            operation="chat",
            correlation_id=correlation_id,
            placeholder=None,
            cache=None,
            key=None,
            cached=None,
            call=lambda: self.ctx.backend.chat_reply(
                history, thread.context, content, thread.context_type
            ),
            to_message=lambda reply: _assistant_message(reply),
            failure_text=self.texts.chat_failed,
        )

    async def analyze_sentence(
        self, sentence: str, *, video_paused: bool = False
    ) -> Optional[str]:
        """
        打开一个句子线程并进行整句分析。

        `video_paused` 为真时（视频学习界面点击字幕），线程中会先加入一条
        视频控制消息，面板据此提供“继续播放视频”。
        """
        if not sentence.strip():
            return None

        key = analysis_cache_key(sentence)
        cached = self.ctx.analysis_cache.get(key)

        initial: list[Message] = []
        if video_paused:
            initial.append(
                _assistant_message(self.texts.video_paused, MessageKind.VIDEO_CONTROL)
            )
        placeholder = None
        if cached is None:
            placeholder = _assistant_message(self.texts.analyzing)
            initial.append(placeholder)

        thread = self.store.create_thread(
            ThreadSeed(
                title=self._title(sentence),
                context=sentence,
                context_type=ContextType.SENTENCE,
                initial_messages=tuple(initial),
            )
        )

        def to_message(result: AnalysisResult) -> Message:
            return _assistant_message(sentence, MessageKind.ANALYSIS_RESULT, result)

        return await self._complete(
            operation="analyze_sentence",
            correlation_id=thread.id,
            placeholder=placeholder,
            cache=self.ctx.analysis_cache,
            key=key,
            cached=cached,
            call=lambda: self.ctx.backend.analyze_sentence(sentence),
            to_message=to_message,
            failure_text=self.texts.analysis_failed,
        )

    async def quick_lookup(
        self, word: str, context: str, source_url: Optional[str] = None
    ) -> Optional[str]:
        """
        结合上下文快速查词。

        复用当前的单词线程（未满上限时）或新建一个；相同的 (word, context)
        只会请求一次后端，之后直接由缓存合成结果消息。
        """
        cleaned = clean_word(word)
        if not cleaned:
            return None

        cache = self.ctx.quick_lookup_cache
        key = quick_lookup_cache_key(
            cleaned, context, self.ctx.config.quick_lookup_key_separator
        )
        cached = cache.get(key)
        placeholder = None
        if cached is None:
            placeholder = _assistant_message(self.texts.looking_up.format(word=cleaned))

        correlation_id = self.store.reuse_or_create_word_thread(
            cleaned,
            [placeholder] if placeholder is not None else [],
            title=self._title(cleaned),
        )

        async def call() -> QuickLookupResult:
            result = await self.ctx.backend.quick_lookup(cleaned, context, source_url)
            # 原句总是取自点击处的上下文
            return result.model_copy(update={"original_sentence": context})

        def to_message(result: QuickLookupResult) -> Message:
            return _assistant_message(cleaned, MessageKind.QUICK_LOOKUP_RESULT, result)

        return await self._complete(
            operation="quick_lookup",
            correlation_id=correlation_id,
            placeholder=placeholder,
            cache=cache,
            key=key,
            cached=cached,
            call=call,
            to_message=to_message,
            failure_text=self.texts.lookup_failed.format(word=cleaned),
        )

    async def lookup_word(self, word: str) -> Optional[str]:
        """完整的词典查询：总是打开一个新的单词线程，不经过缓存。"""
        cleaned = clean_word(word)
        if not cleaned:
            return None

        placeholder = _assistant_message(
            self.texts.dictionary_looking_up.format(word=cleaned)
        )
        thread = self.store.create_thread(
            ThreadSeed(
                title=self._title(cleaned),
                context=cleaned,
                context_type=ContextType.WORD,
                initial_messages=(placeholder,),
            )
        )

        return await self._complete(
            operation="lookup_word",
            correlation_id=thread.id,
            placeholder=placeholder,
            cache=None,
            key=None,
            cached=None,
            call=lambda: self.ctx.backend.lookup_word(cleaned),
            to_message=lambda result: _assistant_message(
                cleaned, MessageKind.DICTIONARY_RESULT, result
            ),
            failure_text=self.texts.lookup_failed.format(word=cleaned),
        )
