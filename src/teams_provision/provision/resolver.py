"""Directory lookups that resolve (or create) the resources a row needs."""

import logging

from ..error_log import ErrorLog
from ..graph_client import DirectoryClient, GraphError, Group, eq_filter
from ..models import (
    ErrorKind,
    ErrorRecord,
    ProvisionRow,
    ResolvedOwner,
    SourceGroupSnapshot,
    TargetGroup,
)

logger = logging.getLogger(__name__)


class StepError(Exception):
    """A fatal failure that aborts the current row."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class ResourceResolver:
    """Resolves owners and groups for a row, creating the target group if needed.

    Lookups are idempotent: the target group is keyed by ``mailNickname`` and
    is only created when no existing group carries that nickname.
    """

    def __init__(self, client: DirectoryClient, error_log: ErrorLog):
        self.client = client
        self.error_log = error_log

    def resolve_owner(self, upn: str) -> ResolvedOwner:
        """Look up the owner's directory ID. A blank UPN means no owner."""
        upn = upn.strip()
        if not upn:
            return ResolvedOwner(upn="", directory_id=None)

        try:
            user = self.client.find_user(upn)
        except GraphError as e:
            raise StepError(ErrorKind.OWNER_NOT_FOUND, f"Owner lookup failed for {upn}: {e}") from e
        if user is None:
            raise StepError(ErrorKind.OWNER_NOT_FOUND, f"Owner not found: {upn}")

        logger.debug("  Owner %s -> %s", upn, user.id)
        return ResolvedOwner(upn=upn, directory_id=user.id)

    def resolve_source_group(self, row: ProvisionRow) -> SourceGroupSnapshot:
        """Find the source group by mail and snapshot its membership.

        A failed membership read is logged and yields an empty member list;
        the target group is still provisioned.
        """
        mail = row.source_group_mail.strip()
        if not mail:
            return SourceGroupSnapshot()

        try:
            groups = self.client.find_groups_by_filter(eq_filter("mail", mail))
        except GraphError as e:
            raise StepError(
                ErrorKind.SOURCE_GROUP_NOT_FOUND, f"Source group lookup failed for {mail}: {e}"
            ) from e
        if not groups:
            raise StepError(ErrorKind.SOURCE_GROUP_NOT_FOUND, f"Source group not found: {mail}")
        if len(groups) > 1:
            logger.warning("  %d groups match mail %s, using the first", len(groups), mail)

        source = groups[0]
        if not source.id:
            raise StepError(
                ErrorKind.SOURCE_GROUP_NOT_FOUND, f"Source group {mail} returned without an id"
            )

        warnings: list[ErrorRecord] = []
        try:
            members = self.client.list_group_members(source.id)
        except GraphError as e:
            record = ErrorRecord.for_row(
                row,
                ErrorKind.SOURCE_GROUP_MEMBER_READ_FAILED,
                f"Could not read members of source group {mail}; "
                f"continuing without member copy: {e}",
            )
            self.error_log.append(record)
            warnings.append(record)
            members = []

        logger.info("  Source group %s (id: %s), %d member(s)", mail, source.id, len(members))
        return SourceGroupSnapshot(
            mail=mail, group_id=source.id, members=tuple(members), warnings=tuple(warnings)
        )

    def resolve_or_create_target_group(
        self, display_name: str, mail_nickname: str, description: str
    ) -> TargetGroup:
        """Return the group with this mailNickname, creating it if none exists."""
        existing: list[Group] = []
        try:
            existing = self.client.find_groups_by_filter(eq_filter("mailNickname", mail_nickname))
        except GraphError as e:
            logger.warning("  Group lookup for %s failed, attempting creation: %s", mail_nickname, e)

        if existing:
            if len(existing) > 1:
                logger.warning(
                    "  %d groups match mailNickname %s, using the first",
                    len(existing),
                    mail_nickname,
                )
            group = existing[0]
            created = False
            logger.info("  Group exists (id: %s)", group.id)
        else:
            logger.info("  Group %s does not exist, creating...", mail_nickname)
            try:
                group = self.client.create_group(display_name, mail_nickname, description)
            except GraphError as e:
                raise StepError(
                    ErrorKind.GROUP_CREATION_FAILED,
                    f"Failed to create group {mail_nickname}: {e}",
                ) from e
            created = True
            logger.info("  Created group (id: %s)", group.id)

        if not group.id:
            raise StepError(
                ErrorKind.EMPTY_GROUP_REFERENCE,
                f"Group reference for {mail_nickname} has no id",
            )

        return TargetGroup(
            id=group.id,
            display_name=group.display_name or display_name,
            mail_nickname=group.mail_nickname or mail_nickname,
            created=created,
        )
