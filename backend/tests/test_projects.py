"""Tests for /projects and /subprojects."""

from __future__ import annotations

import pytest


@pytest.mark.asyncio
class TestProjects:
    async def test_list(self, client, auth_headers):
        resp = await client.get("/projects", headers=auth_headers("viewer"))
        assert resp.status_code == 200
        assert resp.json() == {
            "projects": [
                {"id": 1, "name": "prj1", "fullname": "project 1"},
                {"id": 2, "name": "prj2", "fullname": "project 2"},
                {"id": 3, "name": "prj3", "fullname": "project 3"},
            ]
        }

    async def test_disabled_cannot_list(self, client, auth_headers):
        resp = await client.get("/projects", headers=auth_headers("disabled"))
        assert resp.status_code == 403
        assert resp.json() == {"error": "Access denied"}

    async def test_get_one(self, client, auth_headers):
        resp = await client.get("/projects/2", headers=auth_headers("viewer"))
        assert resp.status_code == 200
        assert resp.json() == {"project": {"id": 2, "name": "prj2", "fullname": "project 2"}}

    async def test_get_unknown(self, client, auth_headers):
        resp = await client.get("/projects/99", headers=auth_headers("viewer"))
        assert resp.status_code == 404
        assert resp.json() == {"error": "Unknown project ID"}

    async def test_get_bad_id(self, client, auth_headers):
        resp = await client.get("/projects/xyz", headers=auth_headers("viewer"))
        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing or invalid ID"}

    async def test_operator_creates(self, client, auth_headers):
        resp = await client.post(
            "/projects", json={"name": "prj4", "fullname": "project 4"}, headers=auth_headers("operator")
        )
        assert resp.status_code == 201
        assert resp.json() == {"id": 4}

        resp = await client.get("/projects/4", headers=auth_headers("viewer"))
        assert resp.json()["project"]["name"] == "prj4"

    async def test_commenter_cannot_create(self, client, auth_headers):
        resp = await client.post(
            "/projects", json={"name": "prj4", "fullname": "project 4"}, headers=auth_headers("commenter")
        )
        assert resp.status_code == 403

    async def test_create_missing_field(self, client, auth_headers):
        resp = await client.post("/projects", json={"name": "prj4"}, headers=auth_headers("operator"))
        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing required value for 'fullname'"}

    async def test_update_partial(self, client, auth_headers):
        resp = await client.put("/projects/3", json={"fullname": "renamed"}, headers=auth_headers("operator"))
        assert resp.status_code == 204
        assert resp.content == b""

        resp = await client.get("/projects/3", headers=auth_headers("viewer"))
        assert resp.json() == {"project": {"id": 3, "name": "prj3", "fullname": "renamed"}}

    async def test_update_unknown(self, client, auth_headers):
        resp = await client.put("/projects/99", json={"name": "x"}, headers=auth_headers("operator"))
        assert resp.status_code == 404

    async def test_admin_deletes_empty_project(self, client, auth_headers):
        resp = await client.delete("/projects/2", headers=auth_headers("admin"))
        assert resp.status_code == 204

        resp = await client.get("/projects/2", headers=auth_headers("viewer"))
        assert resp.status_code == 404

    async def test_delete_with_children_fails(self, client, auth_headers):
        resp = await client.delete("/projects/1", headers=auth_headers("admin"))
        assert resp.status_code == 400
        assert resp.json() == {"error": "Unable to delete project"}

    async def test_operator_cannot_delete(self, client, auth_headers):
        resp = await client.delete("/projects/2", headers=auth_headers("operator"))
        assert resp.status_code == 403

    async def test_delete_unknown(self, client, auth_headers):
        resp = await client.delete("/projects/99", headers=auth_headers("admin"))
        assert resp.status_code == 404


@pytest.mark.asyncio
class TestProjectSubprojects:
    async def test_list_under_project(self, client, auth_headers):
        resp = await client.get("/projects/1/subprojects", headers=auth_headers("viewer"))
        assert resp.status_code == 200
        assert [sp["id"] for sp in resp.json()["subprojects"]] == [2, 3, 4]

    async def test_list_under_unknown_project(self, client, auth_headers):
        resp = await client.get("/projects/99/subprojects", headers=auth_headers("viewer"))
        assert resp.status_code == 404

    async def test_create_under_project(self, client, auth_headers):
        resp = await client.post(
            "/projects/2/subprojects",
            json={"name": "subprj5", "fullname": "subproject 5"},
            headers=auth_headers("operator"),
        )
        assert resp.status_code == 201
        assert resp.json() == {"id": 5}

        resp = await client.get("/subprojects/5", headers=auth_headers("viewer"))
        assert resp.json() == {
            "subproject": {"id": 5, "project_id": 2, "name": "subprj5", "fullname": "subproject 5"}
        }


@pytest.mark.asyncio
class TestSubprojects:
    async def test_list_all(self, client, auth_headers):
        resp = await client.get("/subprojects", headers=auth_headers("viewer"))
        assert resp.status_code == 200
        assert [sp["id"] for sp in resp.json()["subprojects"]] == [1, 2, 3, 4]

    async def test_get_one(self, client, auth_headers):
        resp = await client.get("/subprojects/1", headers=auth_headers("viewer"))
        assert resp.json() == {
            "subproject": {"id": 1, "project_id": 3, "name": "subprj1", "fullname": "subproject 1"}
        }

    async def test_create(self, client, auth_headers):
        resp = await client.post(
            "/subprojects",
            json={"project_id": 3, "name": "subprj5", "fullname": "subproject 5"},
            headers=auth_headers("operator"),
        )
        assert resp.status_code == 201
        assert resp.json() == {"id": 5}

    async def test_create_under_unknown_project(self, client, auth_headers):
        resp = await client.post(
            "/subprojects",
            json={"project_id": 99, "name": "subprj5", "fullname": "subproject 5"},
            headers=auth_headers("operator"),
        )
        assert resp.status_code == 400

    async def test_move_to_other_project(self, client, auth_headers):
        resp = await client.put("/subprojects/1", json={"project_id": 2}, headers=auth_headers("operator"))
        assert resp.status_code == 204

        resp = await client.get("/projects/2/subprojects", headers=auth_headers("viewer"))
        assert [sp["id"] for sp in resp.json()["subprojects"]] == [1]

    async def test_move_to_unknown_project(self, client, auth_headers):
        resp = await client.put("/subprojects/1", json={"project_id": 99}, headers=auth_headers("operator"))
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid value for 'project_id'"}

    async def test_delete(self, client, auth_headers):
        resp = await client.delete("/subprojects/3", headers=auth_headers("admin"))
        assert resp.status_code == 204

    async def test_delete_with_repos_fails(self, client, auth_headers):
        resp = await client.delete("/subprojects/2", headers=auth_headers("admin"))
        assert resp.status_code == 400
        assert resp.json() == {"error": "Unable to delete subproject"}

    async def test_repos_of_subproject(self, client, auth_headers):
        resp = await client.get("/subprojects/4/repos", headers=auth_headers("viewer"))
        assert resp.status_code == 200
        assert [r["id"] for r in resp.json()["repos"]] == [2, 3, 4]

    async def test_create_repo_under_subproject(self, client, auth_headers):
        resp = await client.post(
            "/subprojects/3/repos",
            json={"name": "repo5", "address": "https://example.com/repo5.git"},
            headers=auth_headers("operator"),
        )
        assert resp.status_code == 201
        assert resp.json() == {"id": 5}
