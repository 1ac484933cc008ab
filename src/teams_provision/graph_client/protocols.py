"""Capability interface the provisioning pipeline needs from a directory."""

from typing import Any, Protocol

from ..models import MemberRef
from .models import Group, Team, User


class DirectoryClient(Protocol):
    """Directory, identity and teams operations consumed by the pipeline.

    Implementations raise :class:`~teams_provision.graph_client.client.GraphError`
    for failed remote calls. Lookups that find nothing return ``None`` or an
    empty list instead of raising.
    """

    def find_user(self, identifier: str) -> User | None: ...

    def find_groups_by_filter(self, filter_expression: str) -> list[Group]: ...

    def create_group(self, display_name: str, mail_nickname: str, description: str) -> Group: ...

    def add_group_owner(self, group_id: str, user_id: str) -> None: ...

    def list_group_members(self, group_id: str) -> list[MemberRef]: ...

    def add_group_member(self, group_id: str, member_id: str) -> None: ...

    def create_team(self, group_id: str, settings: dict[str, Any]) -> Team: ...

    def get_team(self, group_id: str) -> Team | None: ...
