"""GitHub OAuth login.

GET /auth/login     redirect the browser to GitHub's consent page
GET /auth/redirect  GitHub's callback: exchange the code, mint a peridot
                    token and hand it to the webapp via localStorage

Neither route needs a token.  The callback answers with HTML, not JSON.
"""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from peridot.auth.token import TokenEncodingError, encode_token
from peridot.config import Settings, get_settings
from peridot.integrations.github import GitHubAuthError, GitHubOAuth

logger = logging.getLogger("peridot.auth")
router = APIRouter()

_TOKEN_PAGE = """<html>
<script>
window.localStorage.setItem('apitoken', {token});
window.location.href = {root};
</script>
</html>
"""

_ERROR_PAGE = """<html>
<body>
<p>Error: {message}</p>
</body>
</html>
"""


def _js_string(value: str) -> str:
    return json.dumps(value).replace("<", "\\u003c")


def _github(request: Request, settings: Settings = Depends(get_settings)) -> GitHubOAuth:
    if not settings.oauth_configured:
        raise HTTPException(status_code=503, detail="GitHub login is not configured")
    return request.app.state.github


@router.get("/login")
async def login(
    settings: Settings = Depends(get_settings),
    github: GitHubOAuth = Depends(_github),
):
    return RedirectResponse(github.authorize_url(settings.OAUTH_STATE), status_code=307)


@router.get("/redirect", response_class=HTMLResponse)
async def redirect(
    code: str = "",
    state: str = "",
    settings: Settings = Depends(get_settings),
    github: GitHubOAuth = Depends(_github),
):
    if state != settings.OAUTH_STATE:
        logger.warning("OAuth callback with mismatched state")
        raise HTTPException(status_code=400, detail="Invalid OAuth state")

    try:
        login_name = await github.fetch_login(code)
    except GitHubAuthError as exc:
        logger.error("GitHub login failed: %s", exc)
        return HTMLResponse(
            _ERROR_PAGE.format(message="Couldn't validate GitHub credentials"), status_code=502
        )

    try:
        token = encode_token(settings.JWT_SECRET_KEY, login_name)
    except TokenEncodingError:
        logger.exception("Could not create token for '%s'", login_name)
        return HTMLResponse(_ERROR_PAGE.format(message="Couldn't create token"), status_code=500)

    page = _TOKEN_PAGE.format(
        token=_js_string(token),
        root=_js_string(settings.WEBAPP_ROOT),
    )
    return HTMLResponse(page)
