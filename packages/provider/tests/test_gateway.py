"""ChecklistGateway 单元测试 -- 端点路径、请求体、降级链"""

import pytest
from sitecheck.core.normalizer import normalize
from sitecheck.provider.exceptions import AuthError, GenericApiError, NotFoundError


class TestFetchChecklists:
    """GET /checklists -> /todos"""

    async def test_primary_endpoint(self, gateway, fake_api, punch_list_payload):
        fake_api.add("GET", "/checklists", json_body=punch_list_payload)

        result = await gateway.fetch_checklists(5, "tok")

        assert result.payload == punch_list_payload
        assert result.is_fallback is False
        assert fake_api.paths() == ["/checklists"]
        assert fake_api.requests[0].url.params["project_id"] == "5"

    async def test_falls_back_to_todos_on_404(self, gateway, fake_api, todos_payload):
        """/checklists 404，/todos 200：返回 todos payload，可正常 normalize"""
        fake_api.add("GET", "/checklists", status_code=404)
        fake_api.add("GET", "/todos", json_body=todos_payload)

        result = await gateway.fetch_checklists("5", "tok")

        assert result.is_fallback is True
        assert fake_api.paths() == ["/checklists", "/todos"]
        assert fake_api.requests[1].url.params["project_id"] == "5"
        checklists = normalize(result.payload, "5")
        assert [c.name for c in checklists] == ["Closeout"]

    async def test_no_fallback_on_auth_error(self, gateway, fake_api):
        fake_api.add("GET", "/checklists", status_code=401, json_body={"error": "bad token"})

        with pytest.raises(AuthError, match="bad token"):
            await gateway.fetch_checklists(5, "tok")

        assert fake_api.paths() == ["/checklists"]

    async def test_both_endpoints_missing(self, gateway, fake_api):
        with pytest.raises(NotFoundError):
            await gateway.fetch_checklists(5, "tok")
        assert fake_api.paths() == ["/checklists", "/todos"]


class TestUpdateTaskCompletion:
    """PUT /tasks/{id} -> /fields/{id}"""

    async def test_complete_task(self, gateway, fake_api):
        fake_api.add("PUT", "/tasks/10", json_body={"id": 10})

        await gateway.update_task_completion(10, "tok", "2024-05-01T00:00:00+00:00")

        assert fake_api.paths("PUT") == ["/tasks/10"]
        assert fake_api.body() == {"completed_at": "2024-05-01T00:00:00+00:00"}

    async def test_uncomplete_sends_null(self, gateway, fake_api):
        fake_api.add("PUT", "/tasks/10", status_code=204)

        await gateway.update_task_completion(10, "tok", None)

        assert fake_api.body() == {"completed_at": None}

    async def test_falls_back_to_fields_with_same_body(self, gateway, fake_api):
        fake_api.add("PUT", "/tasks/10", status_code=404)
        fake_api.add("PUT", "/fields/10", status_code=200)

        result = await gateway.update_task_completion(10, "tok", None)

        assert result.is_fallback is True
        assert fake_api.paths() == ["/tasks/10", "/fields/10"]
        assert fake_api.body(0) == fake_api.body(1)

    async def test_server_error_is_terminal(self, gateway, fake_api):
        fake_api.add("PUT", "/tasks/10", status_code=500, text="boom")

        with pytest.raises(GenericApiError, match="boom"):
            await gateway.update_task_completion(10, "tok", None)

        assert fake_api.paths() == ["/tasks/10"]


class TestPhotosAndProjects:
    async def test_fetch_project_photos(self, gateway, fake_api):
        fake_api.add(
            "GET",
            "/projects/5/photos",
            json_body={"data": [{"id": 1, "uris": [{"type": "thumbnail", "uri": "t.jpg"}]}]},
        )

        photos = await gateway.fetch_project_photos(5, "tok")

        assert len(photos) == 1
        assert photos[0].get_url("web") == "t.jpg"

    async def test_fetch_project_photos_error(self, gateway, fake_api):
        fake_api.add("GET", "/projects/5/photos", status_code=403)

        with pytest.raises(AuthError) as exc_info:
            await gateway.fetch_project_photos(5, "tok")
        assert exc_info.value.message == "API error: 403"

    async def test_list_projects(self, gateway, fake_api):
        fake_api.add(
            "GET",
            "/projects",
            json_body=[{"id": 5, "name": "Harbor View", "address": {"city": "Mobile", "state": "AL"}}],
        )

        projects = await gateway.list_projects("tok", limit=25)

        assert projects[0].name == "Harbor View"
        assert projects[0].address == "Mobile, AL"
        assert fake_api.requests[0].url.params["limit"] == "25"

    async def test_list_projects_tolerates_odd_ids(self, gateway, fake_api):
        fake_api.add("GET", "/projects", json_body={"data": [{"id": 2.5}, {"id": 7.0}, {"name": "x"}]})

        projects = await gateway.list_projects("tok")

        assert [p.id for p in projects] == ["2.5", 7]
