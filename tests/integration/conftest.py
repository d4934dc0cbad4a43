# tests/integration/conftest.py
"""集成测试：通过工厂创建真实的调试后端，组装完整的调度器。"""

from collections.abc import AsyncGenerator

import pytest_asyncio

from smash_assistant.backends import create_backend
from smash_assistant.config import AssistantConfig, BackendName
from smash_assistant.context import AssistantContext
from smash_assistant.dispatcher import AssistantDispatcher


@pytest_asyncio.fixture
async def dispatcher() -> AsyncGenerator[AssistantDispatcher, None]:
    """提供一个使用 DebugBackend（带少量延迟）的调度器，并在结束后关闭后端。"""
    config = AssistantConfig(
        backend=BackendName.DEBUG,
        backend_configs={"debug": {"latency": 0.01}},
    )
    backend = create_backend(config)
    yield AssistantDispatcher(AssistantContext.build(config, backend))
    await backend.close()
