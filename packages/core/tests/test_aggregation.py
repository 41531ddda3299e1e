"""Aggregation View-Model Builder 单元测试"""

from sitecheck.core.aggregation import (
    aggregate_by_name,
    sort_breakdown,
    sort_checklists,
    sort_summaries,
)
from sitecheck.core.models.enums import SortOrder
from sitecheck.core.normalizer import normalize


class TestAggregateByName:
    """按 section 名称聚合"""

    def test_groups_sections_across_checklists(self, sectioned_payload):
        summaries = aggregate_by_name(normalize(sectioned_payload, 5))
        by_name = {s.name: s for s in summaries}

        electrical = by_name["Electrical"]
        assert electrical.total_tasks == 3
        assert electrical.completed_tasks == 1
        assert electrical.completion_percentage == 33
        assert electrical.checklist_names == ["Kitchen", "Bathroom"]
        assert electrical.checklists_count == 2
        assert electrical.completed_checklists == []

    def test_sectionless_tasks_grouped_as_general_items(self, sectioned_payload):
        summaries = aggregate_by_name(normalize(sectioned_payload, 5))
        general = next(s for s in summaries if s.name == "General Items")

        assert general.total_tasks == 1
        assert general.checklist_names == ["Kitchen"]
        assert general.tasks[0].checklist_name == "Kitchen"
        assert general.tasks[0].task.text == "Final walkthrough"

    def test_completed_checklists_tracked(self, sectioned_payload):
        summaries = aggregate_by_name(normalize(sectioned_payload, 5))
        plumbing = next(s for s in summaries if s.name == "Plumbing")

        assert plumbing.completed_checklists == ["Kitchen"]
        assert plumbing.checklist_details[0].is_fully_completed is True

    def test_breakdown_per_checklist(self, sectioned_payload):
        summaries = aggregate_by_name(normalize(sectioned_payload, 5))
        electrical = next(s for s in summaries if s.name == "Electrical")

        details = {d.checklist_name: d for d in electrical.checklist_details}
        assert details["Kitchen"].completed_tasks == 1
        assert details["Kitchen"].total_tasks == 2
        assert details["Kitchen"].completion_percentage == 50
        assert details["Bathroom"].completion_percentage == 0
        assert details["Bathroom"].is_fully_completed is False

    def test_default_order_least_complete_first(self, sectioned_payload):
        summaries = aggregate_by_name(normalize(sectioned_payload, 5))
        assert [s.name for s in summaries] == ["General Items", "Electrical", "Plumbing"]

    def test_empty_section_never_fully_completed(self):
        record = {"id": 1, "project_id": 1, "name": "A", "sections": [{"id": 2, "name": "Empty"}]}

        summary = aggregate_by_name(normalize([record], 1))[0]

        assert summary.total_tasks == 0
        assert summary.completion_percentage == 0
        assert summary.completed_checklists == []

    def test_no_checklists(self):
        assert aggregate_by_name([]) == []


class TestSorting:
    """不重新聚合的重新排序"""

    def test_sort_summaries(self, sectioned_payload):
        summaries = aggregate_by_name(normalize(sectioned_payload, 5))

        by_name = sort_summaries(summaries, SortOrder.NAME)
        desc = sort_summaries(summaries, "completion-desc")

        assert [s.name for s in by_name] == ["Electrical", "General Items", "Plumbing"]
        assert [s.name for s in desc] == ["Plumbing", "Electrical", "General Items"]
        assert sort_summaries(summaries) == summaries

    def test_sort_breakdown_defaults_to_most_complete(self, sectioned_payload):
        summaries = aggregate_by_name(normalize(sectioned_payload, 5))
        electrical = next(s for s in summaries if s.name == "Electrical")

        ordered = sort_breakdown(electrical.checklist_details)

        assert [d.checklist_name for d in ordered] == ["Kitchen", "Bathroom"]

    def test_sort_checklists(self, sectioned_payload):
        tree = normalize(sectioned_payload, 5)

        assert [c.name for c in sort_checklists(tree, SortOrder.NAME)] == [
            "Bathroom",
            "Kitchen",
        ]
        assert [c.name for c in sort_checklists(tree, SortOrder.COMPLETION_ASC)] == [
            "Bathroom",
            "Kitchen",
        ]
        assert [c.name for c in sort_checklists(tree)] == ["Kitchen", "Bathroom"]
