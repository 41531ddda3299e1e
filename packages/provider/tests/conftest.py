"""Provider 包测试 fixtures"""

from typing import Any

import pytest


@pytest.fixture
def todos_payload() -> dict[str, Any]:
    """/todos 端点返回的 payload（项目 5）"""
    return {
        "todos": [
            {
                "id": 3,
                "project_id": 5,
                "name": "Closeout",
                "fields": [
                    {"id": 30, "name": "Keys handed over", "completed_at": None},
                ],
            }
        ]
    }
