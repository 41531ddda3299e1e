"""Projection 单元测试 -- replace-on-write 更新

测试内容：
1. 切换 task 后 section / checklist 百分比自底向上重算
2. 切换两次回到原状态
3. 原树不被修改，未受影响的对象原样复用
4. 展开状态切换与按名称跳转
"""

from sitecheck.core.normalizer import normalize
from sitecheck.core.projection import (
    apply_task_completion,
    expand_section_by_name,
    find_task,
    overall_stats,
    recompute_checklist,
    set_checklist_expanded,
    set_section_expanded,
)


def _stored_matches_recomputed(checklists) -> bool:
    return all(
        c.completion_percentage == recompute_checklist(c).completion_percentage
        for c in checklists
    )


class TestApplyTaskCompletion:
    """task 完成状态更新"""

    def test_complete_sectionless_task(self, punch_list_payload):
        tree = normalize(punch_list_payload, 5)

        updated = apply_task_completion(tree, 1, 10, "2024-05-01T00:00:00Z")

        task = find_task(updated, 1, 10)
        assert task.completed is True
        assert task.completed_at == "2024-05-01T00:00:00Z"
        assert updated[0].completion_percentage == 100

    def test_section_and_checklist_recomputed(self, sectioned_payload):
        tree = normalize(sectioned_payload, 5)

        updated = apply_task_completion(tree, "c1", "t2", "2024-05-01")

        kitchen = updated[0]
        assert kitchen.sections[0].completion_percentage == 100
        assert kitchen.completion_percentage == 75
        assert _stored_matches_recomputed(updated)

    def test_uncomplete_task(self, sectioned_payload):
        tree = normalize(sectioned_payload, 5)

        updated = apply_task_completion(tree, "c1", "t1", None)

        task = find_task(updated, "c1", "t1")
        assert task.completed is False
        assert task.completed_at is None
        assert updated[0].sections[0].completion_percentage == 0

    def test_toggle_twice_round_trip(self, sectioned_payload):
        """切换两次后完成状态与百分比复原"""
        tree = normalize(sectioned_payload, 5)
        original = find_task(tree, "c1", "t2")

        once = apply_task_completion(tree, "c1", "t2", "2024-05-01")
        twice = apply_task_completion(once, "c1", "t2", original.completed_at)

        assert find_task(twice, "c1", "t2").completed == original.completed
        assert [c.completion_percentage for c in twice] == [
            c.completion_percentage for c in tree
        ]
        assert [s.completion_percentage for s in twice[0].sections] == [
            s.completion_percentage for s in tree[0].sections
        ]

    def test_original_tree_untouched(self, sectioned_payload):
        tree = normalize(sectioned_payload, 5)

        updated = apply_task_completion(tree, "c1", "t2", "2024-05-01")

        assert find_task(tree, "c1", "t2").completed is False
        assert updated[0] is not tree[0]
        # 未受影响的 checklist 原样复用
        assert updated[1] is tree[1]

    def test_loose_id_match(self, punch_list_payload):
        tree = normalize(punch_list_payload, 5)
        updated = apply_task_completion(tree, "1", "10", "2024-05-01")
        assert find_task(updated, 1, 10).completed is True

    def test_api_seeded_percentage_replaced_after_mutation(self):
        record = {
            "id": 1,
            "project_id": 1,
            "completed_tasks_count": 9,
            "tasks_count": 10,
            "tasks": [{"id": 1, "completed_at": None}, {"id": 2, "completed_at": None}],
        }
        tree = normalize([record], 1)
        assert tree[0].completion_percentage == 90

        updated = apply_task_completion(tree, 1, 1, "2024-05-01")

        assert updated[0].completion_percentage == 50


class TestFindTask:
    def test_missing_task(self, punch_list_payload):
        tree = normalize(punch_list_payload, 5)
        assert find_task(tree, 1, 999) is None
        assert find_task(tree, 2, 10) is None


class TestExpansion:
    """UI 展开状态"""

    def test_toggle_checklist(self, sectioned_payload):
        tree = normalize(sectioned_payload, 5)

        opened = set_checklist_expanded(tree, "c1")
        closed = set_checklist_expanded(opened, "c1")

        assert opened[0].expanded is True
        assert opened[1].expanded is False
        assert closed[0].expanded is False

    def test_set_section(self, sectioned_payload):
        tree = normalize(sectioned_payload, 5)

        updated = set_section_expanded(tree, "c1", "s2", expanded=True)

        assert [s.expanded for s in updated[0].sections] == [False, True]

    def test_expand_section_by_name(self, sectioned_payload):
        tree = normalize(sectioned_payload, 5)

        updated = expand_section_by_name(tree, "c2", "Electrical")

        assert updated[1].expanded is True
        assert updated[1].sections[0].expanded is True
        # 其他 checklist 的同名 section 不受影响
        assert updated[0].sections[0].expanded is False


class TestOverallStats:
    def test_overall(self, sectioned_payload):
        stats = overall_stats(normalize(sectioned_payload, 5))
        assert stats.total_tasks == 5
        assert stats.completed_tasks == 2
        assert stats.completion_percentage == 40

    def test_empty(self):
        stats = overall_stats([])
        assert stats.total_tasks == 0
        assert stats.completion_percentage == 0
