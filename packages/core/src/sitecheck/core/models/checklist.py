"""Checklist Domain Model -- Checklist / Section / Task 三层 canonical 模型

模型均为 frozen，更新必须通过 model_copy 生成新树（replace-on-write），
不允许就地修改共享对象。
"""

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .photo import Photo


def completion_percentage(completed: int, total: int) -> int:
    """完成百分比，四舍五入（half-up），total 为 0 时返回 0"""
    if total <= 0:
        return 0
    return (200 * completed + total) // (2 * total)


class Task(BaseModel):
    """Task 数据模型 -- 最小工作单元

    completed 由 completed_at 是否为空推导，不可单独设置。
    """

    model_config = ConfigDict(frozen=True)

    id: str | int = Field(description="跨拉取稳定的唯一标识")
    text: str = Field(default="Unnamed Task", description="显示文本")
    completed_at: str | None = Field(default=None, description="完成时间戳")
    notes: str = Field(default="", description="备注")
    required: bool = Field(default=False, description="是否必填")
    photo_required: bool = Field(default=False, description="是否要求照片")
    photos: list[Photo] = Field(default_factory=list, description="附带照片")
    section_id: str | int | None = Field(default=None, description="所属 Section ID")

    @computed_field
    @property
    def completed(self) -> bool:
        return self.completed_at is not None

    @computed_field
    @property
    def has_photos(self) -> bool:
        return len(self.photos) > 0

    @computed_field
    @property
    def photo_count(self) -> int:
        return len(self.photos)


class Section(BaseModel):
    """Section 数据模型 -- Checklist 内的命名分组"""

    model_config = ConfigDict(frozen=True)

    id: str | int | None = Field(default=None, description="Section ID")
    name: str = Field(default="Unnamed Section", description="Section 名称")
    tasks: list[Task] = Field(default_factory=list, description="所属 Task 列表")
    expanded: bool = Field(default=False, description="UI 展开状态（非 canonical）")

    @computed_field
    @property
    def completion_percentage(self) -> int:
        done = sum(1 for task in self.tasks if task.completed)
        return completion_percentage(done, len(self.tasks))


class Checklist(BaseModel):
    """Checklist 数据模型 -- 对应远端一条 checklist / todo 记录

    completion_percentage 为存储值：初次解析时可能来自 API 汇总计数，
    任何变更后都会按当前 task 重新计算。
    """

    model_config = ConfigDict(frozen=True)

    id: str | int = Field(description="Checklist ID")
    name: str = Field(default="Unnamed Checklist", description="Checklist 名称")
    project_id: str | int = Field(description="所属 Project ID")
    sections: list[Section] = Field(default_factory=list)
    sectionless_tasks: list[Task] = Field(default_factory=list)
    completion_percentage: int = Field(default=0, ge=0, le=100)
    web_url: str = Field(default="", description="Web 端查看地址")
    mobile_deep_link: str = Field(default="", description="移动端 deep link")
    expanded: bool = Field(default=False, description="UI 展开状态（非 canonical）")

    def all_tasks(self) -> list[Task]:
        """无 section task 在前，随后按 section 顺序展开"""
        tasks = list(self.sectionless_tasks)
        for section in self.sections:
            tasks.extend(section.tasks)
        return tasks

    @property
    def total_tasks(self) -> int:
        return len(self.sectionless_tasks) + sum(len(s.tasks) for s in self.sections)

    @property
    def completed_tasks(self) -> int:
        return sum(1 for task in self.all_tasks() if task.completed)
