"""Core 异常体系

错误按 ErrorKind 分类，调用方依据 kind 决定展示方式。
"""

from .models.enums import ErrorKind


class SiteCheckError(Exception):
    """SiteCheck 基础异常"""

    kind: ErrorKind = ErrorKind.GENERIC_API

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ProjectNotSelectedError(SiteCheckError):
    """未选择项目或项目缺少 ID -- 本地校验失败，不触发网络请求"""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str = "No project selected or invalid project ID") -> None:
        super().__init__(message)


class StorageError(SiteCheckError):
    """本地存储读写失败

    始终在本地恢复：记录日志，调用方按无缓存继续执行。
    """

    kind = ErrorKind.STORAGE

    def __init__(self, operation: str, key: str, original_error: Exception) -> None:
        """
        Args:
            operation: 失败的操作（read / write / delete）
            key: 涉及的存储 key
            original_error: 原始异常
        """
        super().__init__(f"存储操作失败: {operation} {key} -- {original_error}")
        self.operation = operation
        self.key = key
        self.original_error = original_error
