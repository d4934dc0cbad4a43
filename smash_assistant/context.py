# smash_assistant/context.py
"""定义调度流程中使用的高层上下文对象。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from smash_assistant.cache import ResultCache
from smash_assistant.config import AssistantConfig
from smash_assistant.core.interfaces import AssistantBackend
from smash_assistant.events import ChangeNotifier
from smash_assistant.logging_config import setup_logging
from smash_assistant.store import ThreadStore


@dataclass(frozen=True)
class AssistantContext:
    """一个“工具箱”对象，封装了调度器执行时所需的全部共享状态和依赖项。"""

    config: AssistantConfig
    backend: AssistantBackend
    notifier: ChangeNotifier
    store: ThreadStore
    analysis_cache: ResultCache
    quick_lookup_cache: ResultCache

    @classmethod
    def build(
        cls,
        config: AssistantConfig,
        backend: AssistantBackend,
        notifier: Optional[ChangeNotifier] = None,
        *,
        configure_logging: bool = False,
    ) -> AssistantContext:
        """
        按配置组装存储与两个结果缓存，它们共享同一个变更通知点。

        Args:
            configure_logging: 为真时先按 `config.logging` 配置日志系统。
                宿主应用若自行调用 `setup_logging`，保持默认值即可。

        """
        if configure_logging:
            setup_logging(
                log_level=config.logging.level, log_format=config.logging.format
            )
        notifier = notifier or ChangeNotifier()
        return cls(
            config=config,
            backend=backend,
            notifier=notifier,
            store=ThreadStore(
                notifier, word_thread_lookup_limit=config.word_thread_lookup_limit
            ),
            analysis_cache=ResultCache("analysis", config.cache_config, notifier),
            quick_lookup_cache=ResultCache("quick_lookup", config.cache_config, notifier),
        )
