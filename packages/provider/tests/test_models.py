"""ApiCallResult 数据模型单元测试"""

import pytest
from pydantic import ValidationError
from sitecheck.provider.models import ApiCallResult


class TestApiCallResult:
    def test_defaults(self):
        result = ApiCallResult(method="GET", path="/checklists", status_code=200, duration_ms=5)
        assert result.payload is None
        assert result.is_fallback is False
        assert result.fallback_reason == ""

    def test_negative_duration_rejected(self):
        with pytest.raises(ValidationError):
            ApiCallResult(method="GET", path="/x", status_code=200, duration_ms=-1)

    def test_model_copy_marks_fallback(self):
        result = ApiCallResult(method="GET", path="/todos", status_code=200, duration_ms=1)
        marked = result.model_copy(update={"is_fallback": True, "fallback_reason": "404"})
        assert marked.is_fallback is True
        assert result.is_fallback is False
