# tests/unit/test_store.py
"""针对 `smash_assistant.store.ThreadStore` 的单元测试。"""

import itertools

import pytest

from smash_assistant.core.types import (
    ContextType,
    Message,
    MessageKind,
    MessageRole,
    ThreadSeed,
)
from smash_assistant.events import StoreEvent, StoreEventType
from smash_assistant.store import ThreadStore, generate_thread_id


def _assistant(content: str, kind: MessageKind = MessageKind.PLAIN) -> Message:
    return Message(role=MessageRole.ASSISTANT, content=content, kind=kind)


def _lookup_result(word: str = "run") -> Message:
    return _assistant(word, MessageKind.QUICK_LOOKUP_RESULT)


@pytest.fixture
def store() -> ThreadStore:
    return ThreadStore()


def test_create_thread_prepends_and_activates(store: ThreadStore) -> None:
    first = store.create_thread(ThreadSeed(title="first"))
    second = store.create_thread(
        ThreadSeed(title="second", context="run", context_type=ContextType.WORD)
    )

    assert [t.id for t in store.threads] == [second.id, first.id]
    assert store.active_thread_id == second.id
    assert store.active_thread == second
    assert second.context == "run"
    assert second.context_type is ContextType.WORD
    assert len(store) == 2
    assert first.id in store


def test_generated_ids_are_unique() -> None:
    ids = {generate_thread_id() for _ in range(1000)}
    assert len(ids) == 1000


def test_colliding_id_factory_is_retried() -> None:
    """即使 id 工厂产生重复值，存储中的 id 仍保持唯一。"""
    sequence = itertools.chain(["dup", "dup", "dup"], (f"id-{i}" for i in itertools.count()))
    store = ThreadStore(id_factory=lambda: next(sequence))

    a = store.create_thread(ThreadSeed(title="a"))
    b = store.create_thread(ThreadSeed(title="b"))

    assert a.id == "dup"
    assert b.id == "id-0"


def test_append_messages_replaces_whole_sequence(store: ThreadStore) -> None:
    placeholder = _assistant("正在查询...")
    thread = store.create_thread(ThreadSeed(title="t", initial_messages=(placeholder,)))
    result = _lookup_result()

    store.append_messages(thread.id, [result])

    updated = store.get(thread.id)
    assert updated is not None
    assert updated.messages == (result,)
    # 原线程快照不受影响
    assert thread.messages == (placeholder,)


def test_append_to_unknown_thread_is_noop(store: ThreadStore) -> None:
    store.create_thread(ThreadSeed(title="t"))
    before = store.threads
    store.append_messages("missing", [_assistant("x")])
    assert store.threads == before


def test_select_thread(store: ThreadStore) -> None:
    a = store.create_thread(ThreadSeed(title="a"))
    store.create_thread(ThreadSeed(title="b"))

    store.select_thread(a.id)
    assert store.active_thread_id == a.id

    store.select_thread("missing")
    assert store.active_thread_id == a.id

    store.select_thread(None)
    assert store.active_thread_id is None
    assert store.active_thread is None
    assert len(store) == 2


def test_reuse_word_thread_below_limit(store: ThreadStore) -> None:
    thread_id = store.reuse_or_create_word_thread("run", [_lookup_result()])
    reused = store.reuse_or_create_word_thread("run", [_lookup_result()])

    assert reused == thread_id
    thread = store.get(thread_id)
    assert thread is not None
    assert thread.count_kind(MessageKind.QUICK_LOOKUP_RESULT) == 2
    assert thread.context_type is ContextType.WORD


def test_word_thread_rolls_over_at_limit(store: ThreadStore) -> None:
    """已有 10 条快速查词结果的单词线程不再复用。"""
    ids = [store.reuse_or_create_word_thread("run", [_lookup_result()]) for _ in range(11)]

    assert len(set(ids[:10])) == 1
    assert ids[10] != ids[0]
    assert store.active_thread_id == ids[10]


def test_non_word_active_thread_is_not_reused(store: ThreadStore) -> None:
    sentence = store.create_thread(
        ThreadSeed(title="s", context="The cat sat.", context_type=ContextType.SENTENCE)
    )
    thread_id = store.reuse_or_create_word_thread("cat", [], title="cat")

    assert thread_id != sentence.id
    created = store.get(thread_id)
    assert created is not None
    assert created.title == "cat"
    assert created.messages == ()


def test_other_message_kinds_do_not_count_towards_limit() -> None:
    store = ThreadStore(word_thread_lookup_limit=1)
    thread_id = store.reuse_or_create_word_thread("run", [_assistant("hi")])
    assert store.reuse_or_create_word_thread("run", [_lookup_result()]) == thread_id
    assert store.reuse_or_create_word_thread("run", [_lookup_result()]) != thread_id


def test_mutations_notify_subscribers(store: ThreadStore) -> None:
    events: list[StoreEvent] = []
    unsubscribe = store.subscribe(events.append)

    thread = store.create_thread(ThreadSeed(title="t"))
    store.append_messages(thread.id, [_assistant("x")])
    store.select_thread(None)
    unsubscribe()
    store.select_thread(thread.id)

    assert [e.event_type for e in events] == [
        StoreEventType.THREAD_CREATED,
        StoreEventType.MESSAGES_REPLACED,
        StoreEventType.ACTIVE_CHANGED,
    ]
    assert all(e.thread_id in (thread.id, None) for e in events)
