"""ChecklistApiClient -- CompanyCam REST API 调用封装

单次请求：附加 bearer token 与 JSON 头，非 2xx 响应分类为 GatewayError。
端点降级由 EndpointFallback 负责，本模块不做重试。
"""

import json
import time
from typing import Any

import httpx
import structlog

from .config import DEFAULT_API_BASE_URL
from .exceptions import GatewayUnreachableError, GenericApiError, error_for_status
from .models import ApiCallResult

log = structlog.get_logger()


def build_headers(token: str) -> dict[str, str]:
    """所有请求共用的认证与 JSON 头"""
    return {
        "Authorization": f"Bearer {token}",
        "Accept": "application/json",
        "Content-Type": "application/json",
    }


def extract_error_message(status_code: int, body_text: str) -> str:
    """从错误响应体提取错误信息

    顺序：JSON 的 message / error 字段 -> 原始响应文本 -> "API error: <status>"
    """
    try:
        data = json.loads(body_text)
    except ValueError:
        return body_text or f"API error: {status_code}"

    if isinstance(data, dict):
        value = data.get("message") or data.get("error")
        if value:
            return value if isinstance(value, str) else json.dumps(value, ensure_ascii=False)
    return f"API error: {status_code}"


class ChecklistApiClient:
    """CompanyCam API 客户端"""

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout_s: int = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """初始化 API 客户端

        Args:
            base_url: API 基础 URL
            timeout_s: 请求超时（秒）
            transport: 自定义 httpx transport（测试时注入 MockTransport）
        """
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    async def request(
        self,
        method: str,
        path: str,
        token: str,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
        expect_json: bool = True,
    ) -> ApiCallResult:
        """发送单次请求

        Args:
            method: HTTP 方法
            path: 以 "/" 开头的相对路径
            token: bearer token
            params: 查询参数
            json_body: JSON 请求体（None 表示无请求体）
            expect_json: 2xx 响应体必须是合法 JSON

        Returns:
            ApiCallResult

        Raises:
            GatewayUnreachableError: 连接失败或超时
            NotFoundError / AuthError / GenericApiError: 非 2xx 响应
        """
        url = f"{self._base_url}{path}"
        start_time = time.monotonic()

        log.debug("api_call_start", method=method, path=path)

        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=self._timeout_s,
            ) as http_client:
                response = await http_client.request(
                    method,
                    url,
                    params=params,
                    json=json_body,
                    headers=build_headers(token),
                )
        except httpx.TransportError as e:
            log.error(
                "api_call_unreachable",
                method=method,
                path=path,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise GatewayUnreachableError(url, e) from e

        duration_ms = int((time.monotonic() - start_time) * 1000)

        if not response.is_success:
            message = extract_error_message(response.status_code, response.text)
            log.warning(
                "api_call_failed",
                method=method,
                path=path,
                status_code=response.status_code,
                error=message,
                duration_ms=duration_ms,
            )
            raise error_for_status(response.status_code, message)

        payload: Any = None
        if response.content:
            try:
                payload = response.json()
            except ValueError as e:
                if expect_json:
                    raise GenericApiError(
                        f"Invalid JSON response from {path}: {e}",
                        response.status_code,
                    ) from e

        log.info(
            "api_call_completed",
            method=method,
            path=path,
            status_code=response.status_code,
            duration_ms=duration_ms,
        )

        return ApiCallResult(
            payload=payload,
            method=method,
            path=path,
            status_code=response.status_code,
            duration_ms=duration_ms,
        )
