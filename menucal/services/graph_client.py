from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import httpx

from menucal.core.config import get_settings
from menucal.core.errors import FetchError
from menucal.core.logging import get_logger

logger = get_logger(__name__)

# Refresh tokens this many seconds before Azure AD says they expire.
TOKEN_SAFETY_MARGIN_SECONDS = 60
# Upper bound on @odata.nextLink pages followed for a single query.
MAX_PAGES = 50


class GraphClientError(FetchError):
    """
    Raised when the GraphClient cannot obtain an access token or when a
    Graph API call fails.
    """


@dataclass
class _TokenState:
    access_token: str
    expires_at: datetime


class GraphClient:
    """
    Read-only Microsoft Graph client using the client-credentials flow.

    Responsibilities
    ----------------
    - Fetch and cache an access token.
    - Issue authenticated GET requests, following `@odata.nextLink`
      pagination for collection endpoints.
    - Ask Graph to return event times in UTC so callers never deal with
      Windows time zone names.

    Token caching is in-memory for this process only.
    """

    def __init__(
        self,
        tenant_id: str,
        client_id: str,
        client_secret: str,
        base_url: str = "https://graph.microsoft.com",
        scope: str = "https://graph.microsoft.com/.default",
        timeout_seconds: float = 10.0,
    ) -> None:
        if not tenant_id or not client_id or not client_secret:
            raise ValueError("tenant_id, client_id and client_secret are required")

        self._tenant_id = tenant_id
        self._client_id = client_id
        self._client_secret = client_secret
        self._base_url = base_url.rstrip("/")
        self._scope = scope
        self._timeout_seconds = timeout_seconds

        self._token_state: Optional[_TokenState] = None

    @property
    def token_url(self) -> str:
        return f"https://login.microsoftonline.com/{self._tenant_id}/oauth2/v2.0/token"

    async def _fetch_token(self) -> _TokenState:
        data = {
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "grant_type": "client_credentials",
            "scope": self._scope,
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
                resp = await client.post(self.token_url, data=data)
        except httpx.HTTPError as exc:
            raise GraphClientError(f"Token request failed: {exc}") from exc

        if resp.status_code != 200:
            raise GraphClientError(
                f"Failed to obtain Graph token (status={resp.status_code}): {resp.text}"
            )

        payload = resp.json()
        access_token = payload.get("access_token")
        expires_in = payload.get("expires_in")

        if not access_token or not isinstance(expires_in, (int, float)):
            raise GraphClientError(
                "Invalid token response from Azure AD (missing access_token/expires_in)"
            )

        now = datetime.now(tz=timezone.utc)
        expires_at = now + timedelta(seconds=float(expires_in) - TOKEN_SAFETY_MARGIN_SECONDS)
        logger.debug("graph_token_fetched", expires_at=expires_at.isoformat())

        return _TokenState(access_token=access_token, expires_at=expires_at)

    async def get_access_token(self) -> str:
        """
        Return a valid access token, fetching a new one when none is cached
        or the cached one is about to expire.
        """
        now = datetime.now(tz=timezone.utc)
        if self._token_state and self._token_state.expires_at > now:
            return self._token_state.access_token

        self._token_state = await self._fetch_token()
        return self._token_state.access_token

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self._base_url}/{path.lstrip('/')}"

    async def get_json(
        self,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Issue a GET request and return the JSON payload.

        `path` is either an absolute URL or relative to the base URL.
        Raises GraphClientError on transport errors and non-2xx responses.
        """
        token = await self.get_access_token()
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
            "Prefer": 'outlook.timezone="UTC"',
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
                resp = await client.request(
                    method="GET",
                    url=self._url(path),
                    headers=headers,
                    params=params,
                )
        except httpx.HTTPError as exc:
            raise GraphClientError(f"Graph GET {path} failed: {exc}") from exc

        if resp.status_code // 100 != 2:
            raise GraphClientError(
                f"Graph GET failed (status={resp.status_code}): {resp.text}"
            )
        return resp.json()

    async def get_collection(
        self,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        """
        GET a collection endpoint and concatenate the `value` arrays of all
        pages, in order.
        """
        items: List[Dict[str, Any]] = []
        payload = await self.get_json(path, params=params)
        items.extend(payload.get("value", []))

        pages = 1
        next_link = payload.get("@odata.nextLink")
        while next_link:
            if pages >= MAX_PAGES:
                raise GraphClientError(f"Graph collection {path} exceeded {MAX_PAGES} pages")
            # nextLink already carries the original query string
            payload = await self.get_json(next_link)
            items.extend(payload.get("value", []))
            next_link = payload.get("@odata.nextLink")
            pages += 1

        return items


_graph_client_instance: Optional[GraphClient] = None


def get_graph_client() -> GraphClient:
    """
    Lazily construct the shared GraphClient from application settings.
    """
    global _graph_client_instance
    if _graph_client_instance is None:
        settings = get_settings()
        if not settings.GRAPH_TENANT_ID or not settings.GRAPH_CLIENT_ID or not settings.GRAPH_CLIENT_SECRET:
            raise GraphClientError(
                "GRAPH_TENANT_ID, GRAPH_CLIENT_ID and GRAPH_CLIENT_SECRET must be "
                "configured in settings to use the shared Graph client."
            )
        _graph_client_instance = GraphClient(
            tenant_id=settings.GRAPH_TENANT_ID,
            client_id=settings.GRAPH_CLIENT_ID,
            client_secret=settings.GRAPH_CLIENT_SECRET,
            base_url=str(settings.GRAPH_BASE_URL or "https://graph.microsoft.com"),
            timeout_seconds=settings.GRAPH_TIMEOUT_SECONDS,
        )
    return _graph_client_instance
