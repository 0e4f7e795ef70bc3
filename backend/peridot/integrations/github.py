"""GitHub OAuth client.

Turns the ``code`` from GitHub's OAuth redirect into the caller's GitHub
login.  Only the login is used; everything else about the user comes from
the peridot ``users`` table.
"""

from __future__ import annotations

import logging
from urllib.parse import urlencode

import httpx

logger = logging.getLogger("peridot.github")

AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
ACCESS_TOKEN_URL = "https://github.com/login/oauth/access_token"
USER_API_URL = "https://api.github.com/user"
SCOPE = "user:email"


class GitHubAuthError(Exception):
    """The code exchange or the user lookup failed."""


def _json_object(resp: httpx.Response, step: str) -> dict:
    try:
        data = resp.json()
    except ValueError as exc:
        raise GitHubAuthError(f"{step} returned a non-JSON body") from exc
    if not isinstance(data, dict):
        raise GitHubAuthError(f"{step} returned unexpected JSON")
    return data


class GitHubOAuth:
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self._timeout = timeout
        self._transport = transport

    def authorize_url(self, state: str) -> str:
        params = {"client_id": self.client_id, "scope": SCOPE, "state": state}
        return f"{AUTHORIZE_URL}?{urlencode(params)}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def fetch_login(self, code: str) -> str:
        """Exchange *code* for an access token and return the user's login."""
        async with self._client() as client:
            try:
                resp = await client.post(
                    ACCESS_TOKEN_URL,
                    data={
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "code": code,
                    },
                    headers={"Accept": "application/json"},
                )
            except httpx.HTTPError as exc:
                raise GitHubAuthError(f"could not access Github API: {exc}") from exc
            if resp.status_code != 200:
                raise GitHubAuthError(f"token exchange failed with HTTP {resp.status_code}")
            access_token = _json_object(resp, "token exchange").get("access_token")
            if not access_token:
                raise GitHubAuthError("token exchange returned no access_token")

            try:
                resp = await client.get(
                    USER_API_URL,
                    headers={
                        "Authorization": f"Bearer {access_token}",
                        "Accept": "application/vnd.github+json",
                    },
                )
            except httpx.HTTPError as exc:
                raise GitHubAuthError(f"could not get user's Github data: {exc}") from exc
            if resp.status_code != 200:
                raise GitHubAuthError(f"user lookup failed with HTTP {resp.status_code}")
            login = _json_object(resp, "user lookup").get("login")
            if not isinstance(login, str) or not login:
                raise GitHubAuthError("Github user data has no login")

        logger.info("Validated Github login '%s'", login)
        return login
