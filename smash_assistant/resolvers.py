# smash_assistant/resolvers.py
"""
上下文解析器：把“当前激活的学习界面 + 该界面当前的产物”映射为
(contextText, contextType) 二元组。

本模块中的函数都是纯函数：同步、无副作用、无错误条件。
"""

from __future__ import annotations

import enum
import re
from typing import Any, Optional

from smash_assistant.core.types import (
    AnalysisResult,
    ContextType,
    DictionaryResult,
    ResolvedContext,
    WritingResult,
)


class Surface(str, enum.Enum):
    """共享助手面板所服务的学习界面。"""

    ANALYZER = "analyzer"
    DICTIONARY = "dictionary"
    WRITING = "writing"
    VIDEO = "video"


DEFAULT_CONTEXT_TYPES: dict[Surface, ContextType] = {
    Surface.ANALYZER: ContextType.SENTENCE,
    Surface.DICTIONARY: ContextType.WORD,
    Surface.WRITING: ContextType.WRITING,
    Surface.VIDEO: ContextType.SENTENCE,
}

# 每个界面只读取自己的产物；纯文本在所有界面都可用
_SURFACE_ARTIFACT_TYPES: dict[Surface, tuple[type, ...]] = {
    Surface.ANALYZER: (str, AnalysisResult),
    Surface.DICTIONARY: (str, DictionaryResult),
    Surface.WRITING: (str, WritingResult),
    Surface.VIDEO: (str,),
}

# 点击单词时需要剥离的标点集合
_WORD_PUNCTUATION = re.compile(r"[.,/#!$%^&*;:{}=\-_`~()]")

_SUGGESTIONS: dict[ContextType, tuple[str, ...]] = {
    ContextType.SENTENCE: ("解释一下这个句子的语法结构", "这句话里的重点单词有哪些？"),
    ContextType.WORD: ("帮我造几个不同的例句", "这个词有什么同义词？"),
    ContextType.WRITING: ("这篇文章的语气是否足够正式？", "有哪些表达可以更地道一些？"),
}


def _artifact_text(surface: Surface, artifact: Any) -> Optional[str]:
    if not isinstance(artifact, _SURFACE_ARTIFACT_TYPES[surface]):
        return None
    if isinstance(artifact, str):
        text = artifact
    elif isinstance(artifact, AnalysisResult):
        text = artifact.english_sentence
    elif isinstance(artifact, DictionaryResult):
        text = artifact.word
    else:
        text = "".join(segment.text for segment in artifact.segments)

    if surface is Surface.VIDEO:
        # 字幕条目可能跨行，分析前合并为一行
        text = text.replace("\n", " ")
    return text or None


def resolve_context(surface: Surface, artifact: Any = None) -> ResolvedContext:
    """
    解析指定界面的助手上下文。

    Args:
        surface: 当前激活的学习界面。
        artifact: 该界面的当前产物。可以是刚分析过的 `AnalysisResult`、
            刚查过的 `DictionaryResult`、写作批改的 `WritingResult`，
            也可以直接是文本（例如视频界面的当前字幕）。

    Returns:
        `ResolvedContext`。没有产物（或产物类型与界面无关、文本为空）时
        `text` 为 None，`context_type` 取该界面的默认类型。

    """
    return ResolvedContext(
        text=_artifact_text(surface, artifact),
        context_type=DEFAULT_CONTEXT_TYPES[surface],
    )


def clean_word(raw: str) -> str:
    """剥离点击单词两侧及内部的标点符号。返回空串表示应忽略此次点击。"""
    return _WORD_PUNCTUATION.sub("", raw).strip()


def suggestions_for(context_type: ContextType) -> tuple[str, ...]:
    """返回面板针对该上下文类型提供的快捷提问。"""
    return _SUGGESTIONS[context_type]


def derive_title(content: str, max_chars: int) -> str:
    """取种子内容的前 N 个字符作为线程标题（只在创建时计算一次）。"""
    return content.strip()[:max_chars]
