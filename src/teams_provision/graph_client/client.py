"""Microsoft Graph API client."""

from __future__ import annotations

import logging
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from ..config import GRAPH_BASE_URL
from ..models import MemberRef
from .models import DirectoryObject, Group, Team, User

logger = logging.getLogger(__name__)

GROUP_SELECT = "id,displayName,mailNickname,mail,description,groupTypes,visibility"

_ALREADY_EXISTS_MARKER = "already exist"

ModelT = TypeVar("ModelT", bound=BaseModel)


class GraphError(Exception):
    """Base exception for Microsoft Graph API errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response: Any = None,
        code: str | None = None,
    ):
        full_message = message
        if response:
            text = str(response)
            full_message = f"{message} - Response: {text[:500]}"
        super().__init__(full_message)
        self.status_code = status_code
        self.response = response
        self.code = code

    @property
    def already_exists(self) -> bool:
        """True when Graph rejected a reference add because it is already present."""
        if self.status_code not in (400, 409):
            return False
        return _ALREADY_EXISTS_MARKER in str(self.response or "").lower()

    @property
    def not_found(self) -> bool:
        return self.status_code == 404


def eq_filter(field: str, value: str) -> str:
    """Build an OData equality filter, doubling embedded single quotes."""
    escaped = value.replace("'", "''")
    return f"{field} eq '{escaped}'"


def _error_code(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            return error.get("code")
    return None


def _parse(model: type[ModelT], data: Any) -> ModelT:
    """Validate a response payload, raising GraphError when it has the wrong shape."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise GraphError(
            f"Unexpected {model.__name__} payload ({e.error_count()} validation error(s))",
            response=data,
        ) from e


class GraphClient:
    """Synchronous client for the Microsoft Graph v1.0 API."""

    def __init__(
        self,
        access_token: str,
        base_url: str = GRAPH_BASE_URL,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize the Graph client.

        Args:
            access_token: Bearer token for an application with Group.ReadWrite.All,
                User.Read.All and Team.Create permissions
            base_url: Graph API base URL
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._access_token = access_token
        self._transport = transport
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                base_url=self.base_url,
                headers={
                    "Authorization": f"Bearer {self._access_token}",
                    "Accept": "application/json",
                },
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            self._client.close()
            self._client = None

    def __enter__(self) -> GraphClient:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def _directory_object_url(self, object_id: str) -> str:
        return f"{self.base_url}/directoryObjects/{object_id}"

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Make an HTTP request to the API and return the decoded body."""
        logger.debug("Graph %s %s params=%s", method, path, params)
        try:
            response = self.client.request(method, path, params=params, json=json)
        except httpx.HTTPError as e:
            raise GraphError(f"Request failed: {method} {path}: {e}") from e

        if response.status_code == 401:
            raise GraphError("Unauthorized - check the access token", 401, response.text)
        if response.status_code == 403:
            raise GraphError(
                f"Forbidden - insufficient permissions for {path}",
                403,
                response.text,
                _error_code(response),
            )
        if response.status_code == 404:
            raise GraphError(f"Not found: {path}", 404, response.text, _error_code(response))
        if response.status_code >= 400:
            raise GraphError(
                f"API error: {response.status_code}",
                response.status_code,
                response.text,
                _error_code(response),
            )

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise GraphError(
                f"Invalid JSON from {method} {path}", response.status_code, response.text
            ) from e

    def _paginate(self, path: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """Collect every page of a collection by following ``@odata.nextLink``."""
        items: list[dict[str, Any]] = []
        next_path: str | None = path
        next_params = params
        while next_path:
            page = self._request("GET", next_path, params=next_params) or {}
            if not isinstance(page, dict):
                raise GraphError(f"Unexpected collection page from GET {next_path}", response=page)
            items.extend(page.get("value", []))
            next_path = page.get("@odata.nextLink")
            # nextLink already carries the query string
            next_params = None
        return items

    # -- Users ----------------------------------------------------------------

    def find_user(self, identifier: str) -> User | None:
        """Look up a user by UPN or object ID. Returns None if not found."""
        try:
            data = self._request("GET", f"/users/{quote(identifier, safe='@')}")
        except GraphError as e:
            if e.not_found:
                return None
            raise
        return _parse(User, data)

    # -- Groups ---------------------------------------------------------------

    def find_groups_by_filter(self, filter_expression: str) -> list[Group]:
        """Return all groups matching an OData ``$filter`` expression."""
        items = self._paginate(
            "/groups",
            params={"$filter": filter_expression, "$select": GROUP_SELECT},
        )
        return [_parse(Group, item) for item in items]

    def create_group(self, display_name: str, mail_nickname: str, description: str) -> Group:
        """Create a private, mail-enabled unified group."""
        body: dict[str, Any] = {
            "displayName": display_name,
            "mailNickname": mail_nickname,
            "groupTypes": ["Unified"],
            "mailEnabled": True,
            "securityEnabled": False,
            "visibility": "Private",
        }
        if description:
            body["description"] = description
        data = self._request("POST", "/groups", json=body)
        return _parse(Group, data or {})

    def add_group_owner(self, group_id: str, user_id: str) -> None:
        """Add a user as owner of a group."""
        self._request(
            "POST",
            f"/groups/{group_id}/owners/$ref",
            json={"@odata.id": self._directory_object_url(user_id)},
        )

    # -- Group Members --------------------------------------------------------

    def list_group_members(self, group_id: str) -> list[MemberRef]:
        """Fetch the IDs of every member of a group."""
        items = self._paginate(f"/groups/{group_id}/members", params={"$select": "id"})
        members = [_parse(DirectoryObject, item) for item in items]
        return [MemberRef(directory_id=m.id) for m in members]

    def add_group_member(self, group_id: str, member_id: str) -> None:
        """Add a directory object to a group.

        Raises GraphError with ``already_exists`` set when the member is
        already present.
        """
        self._request(
            "POST",
            f"/groups/{group_id}/members/$ref",
            json={"@odata.id": self._directory_object_url(member_id)},
        )

    # -- Teams ----------------------------------------------------------------

    def create_team(self, group_id: str, settings: dict[str, Any]) -> Team:
        """Create a team bound to an existing unified group."""
        data = self._request("PUT", f"/groups/{group_id}/team", json=settings)
        if not data:
            return Team(id=group_id)
        return _parse(Team, data)

    def get_team(self, group_id: str) -> Team | None:
        """Fetch the team bound to a group. Returns None if there is none."""
        try:
            data = self._request("GET", f"/teams/{group_id}")
        except GraphError as e:
            if e.not_found:
                return None
            raise
        return _parse(Team, data or {"id": group_id})
