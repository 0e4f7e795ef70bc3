"""Tests for jobs, job config parsing and the agent registry."""

from __future__ import annotations

import pytest

from peridot.services.job_service import JobConfigError, JobPathConfig, parse_job_config


# ── Config parsing ──────────────────────────────────────────────


class TestParseJobConfig:
    def test_empty(self):
        assert parse_job_config({}).to_dict() == {}

    def test_full_document(self):
        cfg = parse_job_config(
            {
                "kv": {"prefer": "primary", "mode": "fast"},
                "codereader": {"primary": {"path": "/code"}},
                "spdxreader": {"godeps": {"priorjob_id": 7}, "npm": {"path": "/spdx/npm.spdx"}},
            }
        )
        assert cfg.kv == {"prefer": "primary", "mode": "fast"}
        assert cfg.codereader == {"primary": JobPathConfig(path="/code")}
        assert cfg.spdxreader["godeps"] == JobPathConfig(priorjob_id=7)
        assert cfg.to_dict()["spdxreader"] == {
            "godeps": {"priorjob_id": 7},
            "npm": {"path": "/spdx/npm.spdx"},
        }

    def test_not_an_object(self):
        with pytest.raises(JobConfigError, match="config must be a JSON object"):
            parse_job_config(["kv"])

    def test_non_string_kv(self):
        with pytest.raises(JobConfigError, match="Invalid non-string value for 'kv' with key retries"):
            parse_job_config({"kv": {"retries": 3}})

    def test_two_subkeys(self):
        with pytest.raises(JobConfigError, match="More than one sub-key present for 'codereader' with key primary"):
            parse_job_config({"codereader": {"primary": {"path": "/a", "priorjob_id": 1}}})

    def test_unknown_subkey(self):
        with pytest.raises(JobConfigError, match="Invalid sub-key 'url'"):
            parse_job_config({"spdxreader": {"primary": {"url": "http://x"}}})

    def test_missing_subkey(self):
        with pytest.raises(JobConfigError, match="Missing sub-key for 'codereader' with key primary"):
            parse_job_config({"codereader": {"primary": {}}})

    def test_path_must_be_string(self):
        with pytest.raises(JobConfigError, match="Invalid non-string value for 'codereader' with key 'path'"):
            parse_job_config({"codereader": {"primary": {"path": 12}}})

    @pytest.mark.parametrize("value", ["7", 7.5, True])
    def test_priorjob_id_must_be_integer(self, value):
        with pytest.raises(JobConfigError, match="Invalid non-integer value"):
            parse_job_config({"spdxreader": {"primary": {"priorjob_id": value}}})


# ── Jobs API ────────────────────────────────────────────────────


@pytest.mark.asyncio
class TestJobs:
    async def test_list_for_repopull(self, client, auth_headers):
        resp = await client.get("/repopulls/2/jobs", headers=auth_headers("viewer"))
        assert resp.status_code == 200
        jobs = resp.json()["jobs"]
        assert [j["id"] for j in jobs] == [1, 2]
        assert jobs[1]["priorjob_ids"] == [1]
        assert jobs[1]["config"] == {
            "kv": {"prefer": "primary"},
            "spdxreader": {"primary": {"priorjob_id": 1}},
        }

    async def test_list_for_unknown_repopull(self, client, auth_headers):
        resp = await client.get("/repopulls/99/jobs", headers=auth_headers("viewer"))
        assert resp.status_code == 404

    async def test_get(self, client, auth_headers):
        resp = await client.get("/jobs/1", headers=auth_headers("viewer"))
        assert resp.status_code == 200
        job = resp.json()["job"]
        assert job["repopull_id"] == 2
        assert job["agent_id"] == 1
        assert job["status"] == "stopped"
        assert job["health"] == "ok"
        assert job["output"] == "found 57 files with short-form license IDs"
        assert job["is_ready"] is True
        assert job["priorjob_ids"] == []
        assert job["config"] == {}

    async def test_get_unknown(self, client, auth_headers):
        resp = await client.get("/jobs/99", headers=auth_headers("viewer"))
        assert resp.status_code == 404
        assert resp.json() == {"error": "Unknown job ID"}

    async def test_create(self, client, auth_headers):
        resp = await client.post(
            "/repopulls/3/jobs",
            json={
                "agent_id": 2,
                "priorjob_ids": [1],
                "config": {"codereader": {"primary": {"path": "/code"}}},
            },
            headers=auth_headers("operator"),
        )
        assert resp.status_code == 201
        assert resp.json() == {"id": 3}

        resp = await client.get("/jobs/3", headers=auth_headers("viewer"))
        job = resp.json()["job"]
        assert job["repopull_id"] == 3
        assert job["status"] == "startup"
        assert job["is_ready"] is False
        assert job["priorjob_ids"] == [1]
        assert job["config"] == {"codereader": {"primary": {"path": "/code"}}}

    async def test_create_bad_config(self, client, auth_headers):
        resp = await client.post(
            "/repopulls/3/jobs",
            json={"agent_id": 2, "config": {"codereader": {"primary": {"path": "/a", "priorjob_id": 1}}}},
            headers=auth_headers("operator"),
        )
        assert resp.status_code == 400
        assert resp.json() == {
            "error": "Error parsing value for 'config': "
            "More than one sub-key present for 'codereader' with key primary"
        }

    async def test_create_missing_config(self, client, auth_headers):
        resp = await client.post("/repopulls/3/jobs", json={"agent_id": 2}, headers=auth_headers("operator"))
        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing required value for 'config'"}

    async def test_create_unknown_agent(self, client, auth_headers):
        resp = await client.post(
            "/repopulls/3/jobs", json={"agent_id": 99, "config": {}}, headers=auth_headers("operator")
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid value for 'agent_id'"}

    async def test_commenter_cannot_create(self, client, auth_headers):
        resp = await client.post(
            "/repopulls/3/jobs", json={"agent_id": 2, "config": {}}, headers=auth_headers("commenter")
        )
        assert resp.status_code == 403

    async def test_mark_ready(self, client, auth_headers):
        resp = await client.put("/jobs/2", json={"is_ready": True}, headers=auth_headers("operator"))
        assert resp.status_code == 204

        resp = await client.get("/jobs/2", headers=auth_headers("viewer"))
        assert resp.json()["job"]["is_ready"] is True

    async def test_delete(self, client, auth_headers):
        resp = await client.delete("/jobs/2", headers=auth_headers("admin"))
        assert resp.status_code == 204

        resp = await client.get("/jobs/2", headers=auth_headers("viewer"))
        assert resp.status_code == 404

    async def test_operator_cannot_delete(self, client, auth_headers):
        resp = await client.delete("/jobs/2", headers=auth_headers("operator"))
        assert resp.status_code == 403


# ── Agents API ──────────────────────────────────────────────────


_NEW_AGENT = {
    "name": "scanner",
    "is_active": True,
    "address": "localhost",
    "port": 9004,
    "is_codereader": True,
    "is_spdxreader": False,
    "is_codewriter": False,
    "is_spdxwriter": True,
}


@pytest.mark.asyncio
class TestAgents:
    async def test_list(self, client, auth_headers):
        resp = await client.get("/agents", headers=auth_headers("viewer"))
        assert resp.status_code == 200
        assert [a["name"] for a in resp.json()["agents"]] == ["idsearcher", "attributer", "broken-agent"]

    async def test_get(self, client, auth_headers):
        resp = await client.get("/agents/2", headers=auth_headers("viewer"))
        assert resp.json() == {
            "agent": {
                "id": 2,
                "name": "attributer",
                "is_active": True,
                "address": "localhost",
                "port": 9002,
                "is_codereader": False,
                "is_spdxreader": True,
                "is_codewriter": True,
                "is_spdxwriter": False,
            }
        }

    async def test_get_unknown(self, client, auth_headers):
        resp = await client.get("/agents/99", headers=auth_headers("viewer"))
        assert resp.status_code == 404
        assert resp.json() == {"error": "Unknown agent ID"}

    async def test_create(self, client, auth_headers):
        resp = await client.post("/agents", json=_NEW_AGENT, headers=auth_headers("operator"))
        assert resp.status_code == 201
        assert resp.json() == {"id": 4}

    async def test_create_duplicate_name(self, client, auth_headers):
        resp = await client.post(
            "/agents", json={**_NEW_AGENT, "name": "idsearcher"}, headers=auth_headers("operator")
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Unable to create agent"}

    async def test_create_missing_field(self, client, auth_headers):
        body = {k: v for k, v in _NEW_AGENT.items() if k != "port"}
        resp = await client.post("/agents", json=body, headers=auth_headers("operator"))
        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing required value for 'port'"}

    async def test_update(self, client, auth_headers):
        resp = await client.put(
            "/agents/3", json={"is_active": True, "port": 9300}, headers=auth_headers("operator")
        )
        assert resp.status_code == 204

        resp = await client.get("/agents/3", headers=auth_headers("viewer"))
        agent = resp.json()["agent"]
        assert agent["is_active"] is True
        assert agent["port"] == 9300
        assert agent["name"] == "broken-agent"

    async def test_update_to_taken_name(self, client, auth_headers):
        resp = await client.put("/agents/3", json={"name": "idsearcher"}, headers=auth_headers("operator"))
        assert resp.status_code == 400
        assert resp.json() == {"error": "Unable to update agent"}

    async def test_viewer_cannot_update(self, client, auth_headers):
        resp = await client.put("/agents/3", json={"port": 1}, headers=auth_headers("viewer"))
        assert resp.status_code == 403
