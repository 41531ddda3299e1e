"""EndpointFallback 单元测试

验证：主端点成功不触发降级、仅 404 触发备用端点（is_fallback=True + fallback_reason）、
其他错误直接抛出、备用端点失败时抛出备用端点的错误。
"""

from unittest.mock import AsyncMock

import pytest
from sitecheck.provider.exceptions import (
    AuthError,
    GatewayUnreachableError,
    GenericApiError,
    NotFoundError,
)
from sitecheck.provider.fallback import EndpointFallback
from sitecheck.provider.models import ApiCallResult


def _make_result(path: str = "/checklists") -> ApiCallResult:
    """构造测试用 ApiCallResult"""
    return ApiCallResult(
        payload=[],
        method="GET",
        path=path,
        status_code=200,
        duration_ms=3,
    )


@pytest.fixture
def mock_client():
    """Mock ChecklistApiClient"""
    client = AsyncMock()
    client.request = AsyncMock(return_value=_make_result())
    return client


class TestPrimarySuccess:
    """主端点成功场景"""

    async def test_primary_success_no_fallback(self, mock_client):
        fallback = EndpointFallback(mock_client)

        result = await fallback.call_with_fallback("GET", "/checklists", "/todos", "tok")

        assert result.is_fallback is False
        mock_client.request.assert_called_once_with("GET", "/checklists", "tok")


class TestPrimaryNotFound:
    """主端点 404 场景"""

    async def test_not_found_triggers_secondary(self, mock_client):
        mock_client.request.side_effect = [
            NotFoundError("Not Found", 404),
            _make_result("/todos"),
        ]
        fallback = EndpointFallback(mock_client)

        result = await fallback.call_with_fallback(
            "GET", "/checklists", "/todos", "tok", params={"project_id": "5"}
        )

        assert result.is_fallback is True
        assert result.path == "/todos"
        assert "/checklists" in result.fallback_reason
        # 备用端点使用相同参数
        second_call = mock_client.request.call_args_list[1]
        assert second_call.args == ("GET", "/todos", "tok")
        assert second_call.kwargs == {"params": {"project_id": "5"}}

    async def test_secondary_not_found_raises(self, mock_client):
        mock_client.request.side_effect = [
            NotFoundError("Not Found", 404),
            NotFoundError("Still not found", 404),
        ]
        fallback = EndpointFallback(mock_client)

        with pytest.raises(NotFoundError, match="Still not found"):
            await fallback.call_with_fallback("PUT", "/tasks/1", "/fields/1", "tok")

        assert mock_client.request.call_count == 2

    async def test_secondary_other_error_raises(self, mock_client):
        mock_client.request.side_effect = [
            NotFoundError("Not Found", 404),
            AuthError("Unauthorized", 401),
        ]
        fallback = EndpointFallback(mock_client)

        with pytest.raises(AuthError):
            await fallback.call_with_fallback("GET", "/checklists", "/todos", "tok")


class TestTerminalFailures:
    """非 404 错误不触发降级"""

    @pytest.mark.parametrize(
        "error",
        [
            AuthError("Unauthorized", 401),
            AuthError("Forbidden", 403),
            GenericApiError("Server error", 500),
            GatewayUnreachableError("https://api.test", ConnectionError("refused")),
        ],
    )
    async def test_no_fallback_for_other_errors(self, mock_client, error):
        mock_client.request.side_effect = error
        fallback = EndpointFallback(mock_client)

        with pytest.raises(type(error)):
            await fallback.call_with_fallback("GET", "/checklists", "/todos", "tok")

        mock_client.request.assert_called_once()
