# smash_assistant/cache.py
"""本模块提供按内容寻址的内存结果缓存，用于避免重复的后端调用。"""

import math
from enum import Enum
from typing import Any, Optional

import structlog
from cachetools import Cache, LRUCache, TTLCache
from pydantic import BaseModel, Field

from smash_assistant.events import ChangeNotifier, StoreEvent, StoreEventType

logger = structlog.get_logger(__name__)


class CacheType(str, Enum):
    """定义了支持的缓存类型。"""

    UNBOUNDED = "unbounded"
    TTL = "ttl"
    LRU = "lru"


class CacheConfig(BaseModel):
    """缓存配置模型。默认不淘汰任何条目，在进程生命周期内无界增长。"""

    cache_type: CacheType = CacheType.UNBOUNDED
    maxsize: int = Field(default=1000, gt=0)
    ttl: int = Field(default=3600, gt=0)


def analysis_cache_key(sentence: str) -> str:
    """整句分析缓存键：句子原文，不做任何规范化。"""
    return sentence


def quick_lookup_cache_key(word: str, context: str, separator: str = "::") -> str:
    """快速查词缓存键：单词 + 分隔符 + 上下文原文。"""
    return f"{word}{separator}{context}"


class ResultCache:
    """
    一个从字符串指纹到结果载荷的同步缓存。

    读写都是同步的：命中时调度器无需挂起即可合成结果消息。
    只有成功的结果才会被写入；失败永远不会进入缓存。
    """

    def __init__(
        self,
        name: str,
        config: CacheConfig | None = None,
        notifier: ChangeNotifier | None = None,
    ):
        self.name = name
        self.config = config or CacheConfig()
        self._notifier = notifier
        self.cache: Cache[str, Any]
        self._initialize_cache()

    def _initialize_cache(self) -> None:
        if self.config.cache_type is CacheType.TTL:
            self.cache = TTLCache(maxsize=self.config.maxsize, ttl=self.config.ttl)
        elif self.config.cache_type is CacheType.LRU:
            self.cache = LRUCache(maxsize=self.config.maxsize)
        else:
            self.cache = Cache(maxsize=math.inf)

    def get(self, key: str) -> Optional[Any]:
        return self.cache.get(key)

    def _notify_updated(self) -> None:
        if self._notifier is not None:
            self._notifier.notify(
                StoreEvent(event_type=StoreEventType.CACHE_UPDATED, cache_name=self.name)
            )

    def put(self, key: str, value: Any) -> None:
        self.cache[key] = value
        logger.debug("结果已写入缓存", cache=self.name, cache_key=key)
        self._notify_updated()

    def clear(self) -> None:
        self._initialize_cache()
        logger.debug("缓存已清空", cache=self.name)
        self._notify_updated()

    def __contains__(self, key: object) -> bool:
        return key in self.cache

    def __len__(self) -> int:
        return len(self.cache)
