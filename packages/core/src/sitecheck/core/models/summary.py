"""汇总视图模型 -- 跨 checklist 的 section 聚合结果"""

from pydantic import BaseModel, Field

from .checklist import Task


class ChecklistBreakdown(BaseModel):
    """某个 section 在单个 checklist 内的完成情况"""

    checklist_id: str | int
    checklist_name: str
    completed_tasks: int = Field(default=0, ge=0)
    total_tasks: int = Field(default=0, ge=0)
    completion_percentage: int = Field(default=0, ge=0, le=100)
    is_fully_completed: bool = Field(
        default=False,
        description="total > 0 且全部完成",
    )


class SummaryTask(BaseModel):
    """汇总视图中的 task，附带所属 checklist 引用"""

    task: Task
    checklist_id: str | int
    checklist_name: str


class SectionSummary(BaseModel):
    """按 section 名称聚合的汇总"""

    name: str = Field(description="section 名称，同时作为汇总 ID")
    total_tasks: int = Field(default=0, ge=0)
    completed_tasks: int = Field(default=0, ge=0)
    completion_percentage: int = Field(default=0, ge=0, le=100)
    checklist_names: list[str] = Field(
        default_factory=list,
        description="去重后的所属 checklist 名称（按首次出现顺序）",
    )
    checklist_details: list[ChecklistBreakdown] = Field(default_factory=list)
    tasks: list[SummaryTask] = Field(default_factory=list)
    completed_checklists: list[str] = Field(
        default_factory=list,
        description="该 section 已全部完成的 checklist 名称",
    )

    @property
    def id(self) -> str:
        return self.name

    @property
    def checklists_count(self) -> int:
        return len(self.checklist_names)


class OverallStats(BaseModel):
    """全部 checklist 的总体进度"""

    total_tasks: int = Field(default=0, ge=0)
    completed_tasks: int = Field(default=0, ge=0)
    completion_percentage: int = Field(default=0, ge=0, le=100)
