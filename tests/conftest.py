"""Shared fixtures for teams-provision tests."""

from unittest.mock import MagicMock

import pytest

from teams_provision.error_log import ErrorLog
from teams_provision.graph_client import DirectoryClient, GraphError, Group, Team, User
from teams_provision.models import MemberRef, ProvisionRow

ALREADY_EXISTS_BODY = (
    '{"error": {"code": "Request_BadRequest", "message": "One or more added object '
    "references already exist for the following modified properties: 'members'.\"}}"
)


def make_row(**overrides) -> ProvisionRow:
    values = {
        "owner": "t@x.edu",
        "mail_nickname": "class7a-math",
        "display_name": "Class 7a Math",
        "description": "Mathematics for 7a",
        "section_number": "7A",
        "course_name": "Math",
        "source_group_mail": "",
    }
    values.update(overrides)
    return ProvisionRow(**values)


def graph_error(status_code: int = 500, body: str = "boom") -> GraphError:
    return GraphError(f"API error: {status_code}", status_code, body)


def already_exists_error() -> GraphError:
    return GraphError("API error: 400", 400, ALREADY_EXISTS_BODY, "Request_BadRequest")


def make_client(
    existing_target: list[Group] | None = None,
    source_groups: list[Group] | None = None,
    source_members: list[str] | None = None,
) -> MagicMock:
    """A directory fake where every call succeeds unless a test overrides it."""
    client = MagicMock(spec=DirectoryClient)
    client.find_user.return_value = User(id="owner-1", userPrincipalName="t@x.edu")

    def _find_groups(expr: str) -> list[Group]:
        if expr.startswith("mail eq"):
            return list(source_groups or [])
        return list(existing_target or [])

    client.find_groups_by_filter.side_effect = _find_groups
    client.create_group.side_effect = lambda display_name, mail_nickname, description: Group(
        id="new-group", displayName=display_name, mailNickname=mail_nickname
    )
    client.list_group_members.return_value = [
        MemberRef(directory_id=m) for m in (source_members or [])
    ]
    client.add_group_owner.return_value = None
    client.add_group_member.return_value = None
    client.create_team.side_effect = lambda group_id, settings: Team(id=group_id)
    client.get_team.return_value = None
    return client


@pytest.fixture
def error_log(tmp_path):
    log = ErrorLog(tmp_path / "errors.csv")
    log.open()
    return log


@pytest.fixture
def sleeps():
    """Records requested sleep durations instead of sleeping."""
    calls: list[float] = []
    return calls
