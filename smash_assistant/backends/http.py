# smash_assistant/backends/http.py
"""提供一个通过 HTTP 调用 FastAPI AI 服务的后端适配器。"""

from collections.abc import Sequence
from typing import Any, Optional, TypeVar

import httpx
import structlog
from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from smash_assistant.backends.base import BaseBackend, BaseBackendConfig
from smash_assistant.core.exceptions import BackendError, ConfigurationError
from smash_assistant.core.types import (
    AnalysisResult,
    ContextType,
    DictionaryResult,
    Message,
    MessageKind,
    QuickLookupResult,
)

logger = structlog.get_logger(__name__)

_ModelT = TypeVar("_ModelT", bound=BaseModel)

API_KEY_HEADER = "X-Gemini-API-Key"

# 服务端沿用前端的消息类型命名，普通文本消息称为 'text'
_WIRE_MESSAGE_TYPES: dict[MessageKind, str] = {
    MessageKind.PLAIN: "text",
    MessageKind.ANALYSIS_RESULT: "analysis_result",
    MessageKind.DICTIONARY_RESULT: "dictionary_result",
    MessageKind.QUICK_LOOKUP_RESULT: "quick_lookup_result",
    MessageKind.VIDEO_CONTROL: "video_control",
}


class HttpBackendConfig(BaseSettings, BaseBackendConfig):
    """HTTP 后端的配置模型。"""

    model_config = SettingsConfigDict(env_prefix="SMASH_HTTP_", extra="ignore")

    base_url: str = "http://localhost:8000/api"
    api_key: SecretStr | None = Field(default=None)
    timeout: float = Field(default=15.0, gt=0)

    @field_validator("base_url")
    @classmethod
    def _validate_base_url(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("base_url 不能为空")
        return v.rstrip("/")


def _serialize_message(message: Message) -> dict[str, Any]:
    data = message.payload
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True, exclude_none=True)
    return {
        "role": message.role.value,
        "content": message.content,
        "type": _WIRE_MESSAGE_TYPES[message.kind],
        "data": data,
    }


class HttpBackend(BaseBackend[HttpBackendConfig]):
    """调用 `/fastapi/*` 端点的后端实现。"""

    CONFIG_MODEL = HttpBackendConfig
    VERSION = "1.2.0"

    def __init__(
        self,
        config: HttpBackendConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(config)
        headers: dict[str, str] = {}
        if config.api_key is not None:
            key = config.api_key.get_secret_value()
            if not key:
                raise ConfigurationError("HTTP 后端配置错误: API 密钥为空字符串。")
            headers[API_KEY_HEADER] = key
        self.client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout),
            headers=headers,
            transport=transport,
        )

    async def close(self) -> None:
        if not self.client.is_closed:
            await self.client.aclose()
            logger.info("HTTP 后端的客户端已关闭。")
        await super().close()

    async def _post(self, path: str, payload: dict[str, Any]) -> Any:
        try:
            response = await self.client.post(path, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise BackendError(
                f"服务返回错误状态码 {e.response.status_code}: {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise BackendError(
                f"请求 '{path}' 失败: {e.__class__.__name__}: {e}"
            ) from e

        try:
            return response.json()
        except ValueError as e:
            raise BackendError(f"服务返回了无法解析的响应体: {path}") from e

    @staticmethod
    def _parse(model: type[_ModelT], data: Any) -> _ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise BackendError(f"响应结构不符合 {model.__name__}: {e}") from e

    async def _analyze_sentence(self, sentence: str) -> AnalysisResult:
        data = await self._post("/fastapi/analyze", {"sentence": sentence})
        return self._parse(AnalysisResult, data)

    async def _quick_lookup(
        self, word: str, context: str, source_url: Optional[str]
    ) -> QuickLookupResult:
        data = await self._post(
            "/fastapi/quick-lookup",
            {"word": word, "context": context, "url": source_url},
        )
        return self._parse(QuickLookupResult, data)

    async def _lookup_word(self, word: str) -> DictionaryResult:
        data = await self._post("/fastapi/lookup", {"word": word})
        return self._parse(DictionaryResult, data)

    async def _chat_reply(
        self,
        history: Sequence[Message],
        context: Optional[str],
        user_message: str,
        context_type: ContextType,
    ) -> str:
        data = await self._post(
            "/fastapi/chat",
            {
                "history": [_serialize_message(m) for m in history],
                "contextContent": context,
                "userMessage": user_message,
                "contextType": context_type.value,
            },
        )
        if not isinstance(data, dict) or not isinstance(data.get("response"), str):
            raise BackendError("对话接口返回的结构中缺少 'response' 字段。")
        return data["response"]
