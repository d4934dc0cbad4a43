# smash_assistant/core/types.py
"""
本模块定义了 smash-assistant 会话核心的数据类型。

包括会话线程（Thread）、消息（Message）及其枚举，以及后端服务返回的
结果载荷模型。结果载荷的字段名与后端 JSON 契约一致（camelCase），
在 Python 侧以 snake_case 访问。
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ContextType(str, Enum):
    """线程所绑定上下文片段的语义类别。"""

    SENTENCE = "sentence"
    WORD = "word"
    WRITING = "writing"


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class MessageKind(str, Enum):
    """决定外部渲染器如何解释消息的 `payload`。"""

    PLAIN = "plain"
    ANALYSIS_RESULT = "analysis_result"
    DICTIONARY_RESULT = "dictionary_result"
    QUICK_LOOKUP_RESULT = "quick_lookup_result"
    VIDEO_CONTROL = "video_control"


def _new_message_id() -> str:
    return uuid.uuid4().hex


class Message(BaseModel):
    """
    会话中的一轮消息。一旦追加到线程中便不可变。

    `id` 仅用于在整体替换消息序列时定位并移除占位消息，
    不参与渲染。
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_message_id)
    role: MessageRole
    content: str
    kind: MessageKind = MessageKind.PLAIN
    payload: Optional[Any] = None


class Thread(BaseModel):
    """一个可独立寻址的会话，拥有自己的消息历史和绑定的上下文。"""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    messages: tuple[Message, ...] = ()
    context: Optional[str] = None
    context_type: ContextType = ContextType.SENTENCE
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def count_kind(self, kind: MessageKind) -> int:
        """统计线程中某一类型消息的数量。"""
        return sum(1 for message in self.messages if message.kind is kind)

    @property
    def has_video_control(self) -> bool:
        """线程中是否包含视频控制消息（面板据此提供“继续播放视频”按钮）。"""
        return any(m.kind is MessageKind.VIDEO_CONTROL for m in self.messages)


class ThreadSeed(BaseModel):
    """创建线程时使用的种子数据。"""

    title: str
    context: Optional[str] = None
    context_type: ContextType = ContextType.SENTENCE
    initial_messages: tuple[Message, ...] = ()


class ResolvedContext(BaseModel):
    """上下文解析器的输出：(contextText, contextType)。"""

    model_config = ConfigDict(frozen=True)

    text: Optional[str] = None
    context_type: ContextType


# --- 后端结果载荷 ---


class _CamelModel(BaseModel):
    """后端 JSON 使用 camelCase 字段名。"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalysisChunk(_CamelModel):
    text: str
    grammar_description: str = ""
    part_of_speech: str = ""
    role: str = ""


class DetailedToken(_CamelModel):
    text: str
    part_of_speech: str = ""
    role: str = ""
    explanation: str = ""
    meaning: str = ""


class CorrectionChange(_CamelModel):
    type: Literal["add", "remove", "keep"]
    text: str


class Correction(_CamelModel):
    original: str
    corrected: str
    error_type: str = ""
    reason: str = ""
    changes: list[CorrectionChange] = Field(default_factory=list)


class AnalysisResult(_CamelModel):
    """整句语法分析结果。"""

    english_sentence: str
    chinese_translation: str = ""
    chunks: list[AnalysisChunk] = Field(default_factory=list)
    detailed_tokens: list[DetailedToken] = Field(default_factory=list)
    correction: Optional[Correction] = None
    sentence_pattern: Optional[str] = None
    main_tense: Optional[str] = None


class QuickLookupResult(_CamelModel):
    """结合上下文的快速查词结果。"""

    word: str
    context_meaning: str = ""
    part_of_speech: str = ""
    grammar_role: str = ""
    explanation: str = ""
    original_sentence: Optional[str] = None
    url: Optional[str] = None


class DictionaryDefinition(_CamelModel):
    meaning: str
    explanation: str = ""
    example: str = ""
    example_translation: str = ""


class DictionaryCollocation(_CamelModel):
    phrase: str
    meaning: str = ""
    example: str = ""
    example_translation: str = ""


class DictionaryEntry(_CamelModel):
    part_of_speech: str
    coca_frequency: Optional[str] = None
    definitions: list[DictionaryDefinition] = Field(default_factory=list)


class DictionaryResult(_CamelModel):
    """完整词典查询结果。"""

    word: str
    phonetic: str = ""
    entries: list[DictionaryEntry] = Field(default_factory=list)
    collocations: Optional[list[DictionaryCollocation]] = None


class WritingSegment(_CamelModel):
    type: Literal["unchanged", "change"]
    text: str
    original: Optional[str] = None
    reason: Optional[str] = None
    category: Optional[str] = None


class WritingResult(_CamelModel):
    """写作批改结果；助手只使用其分段文本来重建草稿上下文。"""

    mode: str
    general_feedback: str = ""
    segments: list[WritingSegment] = Field(default_factory=list)
