"""
基於 httpx 的 HTTP 傳輸層。

request action 只透過 `await transport.request(config)` 使用傳輸層：
成功時返回已讀取完畢的 httpx.Response，非 2xx 狀態或網路錯誤時拋出
TransportError。上傳與下載進度會以 ProgressEvent 回報給 config 中的回調。
"""
import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

import httpx
from pydantic import BaseModel, ConfigDict, Field

from .errors import TransportError
from .types import ProgressCallback, ProgressEvent

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class RequestConfig(BaseModel):
    """一次 HTTP 請求所需的全部資訊。"""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    base_url: Optional[str] = None
    method: str = "get"
    url: str
    data: Optional[Dict[str, Any]] = None
    files: Optional[List[Tuple[str, Any]]] = None
    params: Any = None
    headers: Dict[str, str] = Field(default_factory=dict)
    on_upload_progress: Optional[ProgressCallback] = None
    on_download_progress: Optional[ProgressCallback] = None


class ProgressStream(httpx.AsyncByteStream):
    """包裹一個位元組流，每讀出一個區塊就回報累計進度。"""

    def __init__(self, stream: Any, total: Optional[int], callback: ProgressCallback):
        self._stream = stream
        self._total = total
        self._callback = callback
        self._loaded = 0

    async def __aiter__(self) -> AsyncIterator[bytes]:
        async for chunk in self._stream:
            self._loaded += len(chunk)
            self._callback(ProgressEvent(loaded=self._loaded, total=self._total))
            yield chunk

    async def aclose(self) -> None:
        close = getattr(self._stream, "aclose", None)
        if close is not None:
            await close()


def _content_length(headers: httpx.Headers) -> Optional[int]:
    value = headers.get("Content-Length")
    return int(value) if value and value.isdigit() else None


class HttpxTransport:
    """
    以 httpx.AsyncClient 發送請求的傳輸層。

    每次請求都會建立一個短生命週期的 AsyncClient，因此同一個實例
    可以安全地在不同的事件迴圈中使用。

    Args:
        transport: 傳給 AsyncClient 的底層 httpx transport（測試時可用 httpx.MockTransport）
        timeout: 請求逾時秒數
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None, timeout: float = DEFAULT_TIMEOUT):
        self._transport = transport
        self._timeout = timeout

    async def request(self, config: RequestConfig) -> httpx.Response:
        """
        發送請求並讀取完整回應。

        Args:
            config: 請求配置

        Returns:
            狀態為 2xx、內容已讀取的 httpx.Response

        Raises:
            TransportError: 回應狀態不是 2xx，或發生網路錯誤
        """
        async with httpx.AsyncClient(
            base_url=config.base_url or "",
            transport=self._transport,
            timeout=self._timeout,
        ) as client:
            request = client.build_request(
                config.method.upper(),
                config.url,
                data=config.data,
                files=config.files,
                params=config.params,
                headers=config.headers,
            )
            # 沒有 body 的請求不回報上傳進度
            has_body = "Content-Length" in request.headers or "Transfer-Encoding" in request.headers
            if config.on_upload_progress is not None and has_body:
                request.stream = ProgressStream(
                    request.stream, _content_length(request.headers), config.on_upload_progress
                )

            logger.debug("%s %s", request.method, request.url)
            try:
                response = await client.send(request, stream=True)
                try:
                    if config.on_download_progress is not None:
                        response.stream = ProgressStream(
                            response.stream, _content_length(response.headers), config.on_download_progress
                        )
                    await response.aread()
                finally:
                    await response.aclose()
                response.raise_for_status()
            except httpx.HTTPStatusError as err:
                raise TransportError(
                    f"{err.request.method} {err.request.url} returned {err.response.status_code}",
                    status_code=err.response.status_code,
                    response=err.response,
                    request=err.request,
                ) from err
            except httpx.RequestError as err:
                raise TransportError(
                    f"{request.method} {request.url} failed: {err}",
                    request=request,
                ) from err

            logger.debug("%s %s -> %s", request.method, request.url, response.status_code)
            return response
