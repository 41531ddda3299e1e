"""EndpointFallback -- 端点降级管理器

先请求主端点，仅当主端点返回 404 时改用备用端点重试一次。
其他任何失败都是终态，直接抛出。
"""

from typing import Any

import structlog

from .exceptions import NotFoundError
from .models import ApiCallResult

log = structlog.get_logger()


class EndpointFallback:
    """端点降级管理器

    降级链: 主端点 -> 备用端点（如 /checklists -> /todos、/tasks -> /fields）
    不维护显式的"降级状态"标记，每次调用都先尝试主端点。
    """

    def __init__(self, client) -> None:
        """初始化降级管理器

        Args:
            client: ChecklistApiClient（或具备相同 request() 接口的对象）
        """
        self._client = client

    async def call_with_fallback(
        self,
        method: str,
        primary_path: str,
        secondary_path: str,
        token: str,
        **kwargs: Any,
    ) -> ApiCallResult:
        """带端点降级的请求

        Returns:
            ApiCallResult
            - 主端点成功: is_fallback=False
            - 备用端点成功: is_fallback=True, fallback_reason=<主端点错误>

        Raises:
            NotFoundError: 备用端点同样返回 404（降级已用尽）
            GatewayError: 主端点非 404 失败，或备用端点失败
        """
        try:
            return await self._client.request(method, primary_path, token, **kwargs)
        except NotFoundError as e:
            primary_error = e
            log.info(
                "primary_endpoint_not_found_trying_fallback",
                method=method,
                primary_path=primary_path,
                secondary_path=secondary_path,
            )

        result = await self._client.request(method, secondary_path, token, **kwargs)
        log.info(
            "endpoint_fallback_activated",
            method=method,
            secondary_path=secondary_path,
        )
        return result.model_copy(
            update={
                "is_fallback": True,
                "fallback_reason": f"{primary_path} 返回 404: {primary_error}",
            }
        )
