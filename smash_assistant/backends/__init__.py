# smash_assistant/backends/__init__.py
"""
外部 AI 服务适配器及其工厂。

本模块负责根据应用配置实例化具体的后端，实现后端的可替换与解耦。
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from smash_assistant.core.exceptions import BackendNotFoundError, ConfigurationError

from .base import BaseBackend, BaseBackendConfig
from .debug import DebugBackend, DebugBackendConfig
from .http import HttpBackend, HttpBackendConfig

if TYPE_CHECKING:
    from smash_assistant.config import AssistantConfig

logger = structlog.get_logger(__name__)

BACKEND_REGISTRY: dict[str, type[BaseBackend[Any]]] = {
    "http": HttpBackend,
    "debug": DebugBackend,
}


def create_backend(config: AssistantConfig) -> BaseBackend[Any]:
    """
    根据配置中的 `backend` 名称，创建并返回一个后端实例。

    Raises:
        BackendNotFoundError: 如果请求的后端未注册。
        ConfigurationError: 如果后端所需的配置无效。

    """
    backend_name = config.backend.value
    backend_class = BACKEND_REGISTRY.get(backend_name)
    if not backend_class:
        raise BackendNotFoundError(
            f"后端 '{backend_name}' 未找到。已注册的后端: {list(BACKEND_REGISTRY.keys())}"
        )

    backend_config_data = config.backend_configs.get(backend_name, {})
    try:
        backend_config = backend_class.CONFIG_MODEL(**backend_config_data)
    except Exception as e:
        raise ConfigurationError(
            f"创建后端 '{backend_name}' 实例时配置验证失败: {e}"
        ) from e

    backend = backend_class(config=backend_config)
    logger.info("后端已成功创建", backend=backend_name, version=backend.VERSION)
    return backend


__all__ = [
    "BACKEND_REGISTRY",
    "BaseBackend",
    "BaseBackendConfig",
    "DebugBackend",
    "DebugBackendConfig",
    "HttpBackend",
    "HttpBackendConfig",
    "create_backend",
]
