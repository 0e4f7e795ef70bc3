"""Shared fixtures for backend tests.

Every test gets its own file-backed SQLite database seeded with a fixed set
of users and a small project tree.  Tokens are minted with the real codec
and the ``keyForTesting`` signing key.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from peridot.auth.roles import Role
from peridot.auth.token import encode_token
from peridot.config import Settings
from peridot.db.engine import create_tables
from peridot.db.models import Agent, Job, Project, Repo, RepoBranch, RepoPull, Subproject, User
from peridot.main import create_app

TEST_KEY = "keyForTesting"
TEST_STATE = "nonRandomStateString"


# ── Seed data ───────────────────────────────────────────────────


def _seed_rows() -> list:
    return [
        User(id=1, name="Admin", github="admin", access_level=Role.ADMIN),
        User(id=2, name="Operator", github="operator", access_level=Role.OPERATOR),
        User(id=3, name="Commenter", github="commenter", access_level=Role.COMMENTER),
        User(id=4, name="Viewer", github="viewer", access_level=Role.VIEWER),
        User(id=10, name="Disabled", github="disabled", access_level=Role.DISABLED),
        Project(id=1, name="prj1", fullname="project 1"),
        Project(id=2, name="prj2", fullname="project 2"),
        Project(id=3, name="prj3", fullname="project 3"),
        Subproject(id=1, project_id=3, name="subprj1", fullname="subproject 1"),
        Subproject(id=2, project_id=1, name="subprj2", fullname="subproject 2"),
        Subproject(id=3, project_id=1, name="subprj3", fullname="subproject 3"),
        Subproject(id=4, project_id=1, name="subprj4", fullname="subproject 4"),
        Repo(id=1, subproject_id=2, name="repo1", address="https://example.com/repo1.git"),
        Repo(id=2, subproject_id=4, name="repo2", address="https://example.com/repo2.git"),
        Repo(id=3, subproject_id=4, name="repo3", address="https://example.com/repo3.git"),
        Repo(id=4, subproject_id=4, name="repo4", address="https://example.com/repo4.git"),
        RepoBranch(repo_id=1, branch="master"),
        RepoBranch(repo_id=2, branch="master"),
        RepoBranch(repo_id=2, branch="alpha"),
        RepoBranch(repo_id=2, branch="beta"),
        RepoBranch(repo_id=4, branch="master"),
        RepoBranch(repo_id=4, branch="dev"),
        RepoPull(
            id=1, repo_id=2, branch="master", tag="v1.1",
            commit="abcdef012345abcdef012345abcdef0123451234",
            pulled_at=datetime(2019, 5, 2, 14, 0, tzinfo=timezone.utc),
        ),
        RepoPull(id=2, repo_id=2, branch="master", tag="v1.2", commit="abcdef012345abcdef012345abcdef0123455678"),
        RepoPull(id=3, repo_id=4, branch="dev", commit="abcdef012345abcdef012345abcdef01234590ab"),
        Agent(id=1, name="idsearcher", is_active=True, address="localhost", port=9001,
              is_codereader=True, is_spdxreader=False, is_codewriter=False, is_spdxwriter=True),
        Agent(id=2, name="attributer", is_active=True, address="localhost", port=9002,
              is_codereader=False, is_spdxreader=True, is_codewriter=True, is_spdxwriter=False),
        Agent(id=3, name="broken-agent", is_active=False, address="example.com", port=9003,
              is_codereader=True, is_spdxreader=False, is_codewriter=True, is_spdxwriter=True),
        Job(id=1, repopull_id=2, agent_id=1, status="stopped", health="ok",
            output="found 57 files with short-form license IDs", is_ready=True),
        Job(id=2, repopull_id=2, agent_id=2, priorjob_ids_json="[1]", status="startup", health="ok",
            is_ready=False,
            config_json=json.dumps({"kv": {"prefer": "primary"},
                                    "spdxreader": {"primary": {"priorjob_id": 1}}})),
    ]


async def seed(app) -> None:
    async with app.state.session_factory() as db:
        for row in _seed_rows():
            db.add(row)
            await db.flush()
        await db.commit()


# ── App / client fixtures ───────────────────────────────────────


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        PERIDOT_DB_URL=f"sqlite+aiosqlite:///{tmp_path / 'peridot.db'}",
        JWT_SECRET_KEY=TEST_KEY,
        GITHUB_CLIENT_ID="test-client-id",
        GITHUB_CLIENT_SECRET="test-client-secret",
        OAUTH_STATE=TEST_STATE,
        INITIAL_ADMIN_GITHUB="admin",
        WEBAPP_ROOT="/",
    )


@pytest_asyncio.fixture
async def app(settings):
    # ASGITransport does not run the lifespan, so build the schema here.
    application = create_app(settings)
    await create_tables(application.state.engine)
    await seed(application)
    yield application
    await application.state.engine.dispose()


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def db(app):
    async with app.state.session_factory() as session:
        yield session


# ── Token helpers ───────────────────────────────────────────────


def token_for(github: str) -> str:
    return encode_token(TEST_KEY, github)


def auth(github: str) -> dict[str, str]:
    """Authorization header for the seeded user with this GitHub login."""
    return {"Authorization": f"Bearer {token_for(github)}"}


@pytest.fixture
def auth_headers():
    return auth
