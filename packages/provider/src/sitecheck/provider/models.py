"""数据模型 -- ApiCallResult"""

from typing import Any

from pydantic import BaseModel, Field


class ApiCallResult(BaseModel):
    """单次 API 调用结果

    endpoint 降级（/checklists -> /todos、/tasks -> /fields）时 is_fallback=True。
    """

    payload: Any = Field(default=None, description="已 JSON 解码的响应体")
    method: str = Field(description="HTTP 方法")
    path: str = Field(description="实际命中的路径")
    status_code: int = Field(description="HTTP 状态码")
    duration_ms: int = Field(ge=0, description="端到端耗时（毫秒）")

    # 降级信息
    is_fallback: bool = Field(default=False, description="是否命中备用端点")
    fallback_reason: str = Field(default="", description="降级原因说明")
