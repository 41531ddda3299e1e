"""Gateway 异常体系

非 2xx 响应按状态码分类：
- 404 -> NotFoundError（端点降级已用尽）
- 401 / 403 -> AuthError
- 其他 -> GenericApiError
连接失败、超时 -> GatewayUnreachableError
"""

from sitecheck.core.exceptions import SiteCheckError
from sitecheck.core.models.enums import ErrorKind


class GatewayError(SiteCheckError):
    """Gateway 基础异常，message 为分类后的服务端错误信息"""

    kind = ErrorKind.GENERIC_API

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """
        Args:
            message: 分类后的错误信息（唯一内容）
            status_code: HTTP 状态码，无响应时为 None
        """
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(GatewayError):
    """HTTP 404"""

    kind = ErrorKind.NOT_FOUND


class AuthError(GatewayError):
    """HTTP 401 / 403 -- token 无效或权限不足"""

    kind = ErrorKind.AUTH


class GenericApiError(GatewayError):
    """其他非 2xx 响应，或 2xx 响应体无法解析"""

    kind = ErrorKind.GENERIC_API


class GatewayUnreachableError(GatewayError):
    """API 不可达（连接失败、超时、DNS 解析失败等）"""

    def __init__(self, url: str, original_error: Exception) -> None:
        """
        Args:
            url: 尝试访问的地址
            original_error: 原始异常
        """
        super().__init__(f"API 不可达: {url} -- {original_error}")
        self.url = url
        self.original_error = original_error


def error_for_status(status_code: int, message: str) -> GatewayError:
    """按状态码构造对应的异常类型"""
    if status_code == 404:
        return NotFoundError(message, status_code)
    if status_code in (401, 403):
        return AuthError(message, status_code)
    return GenericApiError(message, status_code)
