"""缓存条目模型"""

from typing import Any

from pydantic import BaseModel, Field

from .enums import CacheStatus


class CacheEntry(BaseModel):
    """缓存读取结果

    status 仅作提示：过期条目同样返回 payload，由调用方决定是否重新拉取。
    """

    key: str = Field(description="缓存 key（checklists-{project_id}）")
    payload: Any = Field(description="原始（未 normalize）payload")
    written_at: float = Field(description="写入时间（epoch 秒）")
    status: CacheStatus = Field(description="cached / expired")

    @property
    def is_expired(self) -> bool:
        return self.status == CacheStatus.EXPIRED
