"""Aggregation View-Model Builder -- 跨 checklist 按 section 名称聚合

无 section 的 task 统一归入 "General Items" 分组。
默认按完成百分比升序输出（最不完整的区域排在前面）。
"""

from collections.abc import Sequence

from .config import GENERAL_SECTION_NAME
from .models.checklist import Checklist, Task, completion_percentage
from .models.enums import SortOrder
from .models.summary import ChecklistBreakdown, SectionSummary, SummaryTask


class _SectionAccumulator:
    """单个 section 名称下的累加器"""

    def __init__(self, name: str) -> None:
        self.name = name
        self.total_tasks = 0
        self.completed_tasks = 0
        self.checklist_names: list[str] = []
        self.details: list[ChecklistBreakdown] = []
        self.tasks: list[SummaryTask] = []
        self.completed_checklists: list[str] = []

    def add(self, checklist: Checklist, tasks: list[Task]) -> None:
        if checklist.name not in self.checklist_names:
            self.checklist_names.append(checklist.name)

        done = sum(1 for task in tasks if task.completed)
        total = len(tasks)
        is_fully_completed = total > 0 and done == total
        if is_fully_completed:
            self.completed_checklists.append(checklist.name)

        self.details.append(
            ChecklistBreakdown(
                checklist_id=checklist.id,
                checklist_name=checklist.name,
                completed_tasks=done,
                total_tasks=total,
                completion_percentage=completion_percentage(done, total),
                is_fully_completed=is_fully_completed,
            )
        )

        self.total_tasks += total
        self.completed_tasks += done
        self.tasks.extend(
            SummaryTask(task=task, checklist_id=checklist.id, checklist_name=checklist.name)
            for task in tasks
        )

    def build(self) -> SectionSummary:
        return SectionSummary(
            name=self.name,
            total_tasks=self.total_tasks,
            completed_tasks=self.completed_tasks,
            completion_percentage=completion_percentage(
                self.completed_tasks, self.total_tasks
            ),
            checklist_names=self.checklist_names,
            checklist_details=self.details,
            tasks=self.tasks,
            completed_checklists=self.completed_checklists,
        )


def aggregate_by_name(checklists: Sequence[Checklist]) -> list[SectionSummary]:
    """按 section 名称（精确匹配）聚合所有 checklist

    Args:
        checklists: canonical checklist 列表

    Returns:
        SectionSummary 列表，按 completion_percentage 升序
    """
    groups: dict[str, _SectionAccumulator] = {}

    for checklist in checklists:
        for section in checklist.sections:
            groups.setdefault(section.name, _SectionAccumulator(section.name)).add(
                checklist, section.tasks
            )

        if checklist.sectionless_tasks:
            groups.setdefault(
                GENERAL_SECTION_NAME, _SectionAccumulator(GENERAL_SECTION_NAME)
            ).add(checklist, checklist.sectionless_tasks)

    summaries = [acc.build() for acc in groups.values()]
    return sort_summaries(summaries, SortOrder.COMPLETION_ASC)


def sort_summaries(
    summaries: Sequence[SectionSummary],
    order: SortOrder | str = SortOrder.DEFAULT,
) -> list[SectionSummary]:
    """重新排序汇总结果，不重新聚合

    DEFAULT 保持输入顺序（aggregate_by_name 的输出已按百分比升序）。
    排序稳定：百分比相同时保持原有相对顺序。
    """
    order = SortOrder(order)
    if order == SortOrder.NAME:
        return sorted(summaries, key=lambda s: s.name.casefold())
    if order == SortOrder.COMPLETION_ASC:
        return sorted(summaries, key=lambda s: s.completion_percentage)
    if order == SortOrder.COMPLETION_DESC:
        return sorted(summaries, key=lambda s: s.completion_percentage, reverse=True)
    return list(summaries)


def sort_breakdown(
    details: Sequence[ChecklistBreakdown],
    order: SortOrder | str = SortOrder.COMPLETION_DESC,
) -> list[ChecklistBreakdown]:
    """排序单个 section 的 per-checklist 明细，默认最完整的在前"""
    order = SortOrder(order)
    if order == SortOrder.NAME:
        return sorted(details, key=lambda d: d.checklist_name.casefold())
    if order == SortOrder.COMPLETION_ASC:
        return sorted(details, key=lambda d: d.completion_percentage)
    if order == SortOrder.COMPLETION_DESC:
        return sorted(details, key=lambda d: d.completion_percentage, reverse=True)
    return list(details)


def sort_checklists(
    checklists: Sequence[Checklist],
    order: SortOrder | str = SortOrder.DEFAULT,
) -> list[Checklist]:
    """checklist 列表排序（name / completion-asc / completion-desc）"""
    order = SortOrder(order)
    if order == SortOrder.NAME:
        return sorted(checklists, key=lambda c: c.name.casefold())
    if order == SortOrder.COMPLETION_ASC:
        return sorted(checklists, key=lambda c: c.completion_percentage)
    if order == SortOrder.COMPLETION_DESC:
        return sorted(checklists, key=lambda c: c.completion_percentage, reverse=True)
    return list(checklists)
