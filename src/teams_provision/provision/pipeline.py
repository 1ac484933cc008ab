"""Per-row provisioning workflow.

Each row moves through these steps, strictly in order:

  1. Validate mandatory fields (no remote calls)
  2. Resolve the owner's directory ID
  3. Resolve the source group and snapshot its members
  4. Resolve or create the target unified group (keyed by mailNickname)
  5. Assign the owner (non-fatal)
  6. Copy source members into the target group (non-fatal, per member)
  7. Wait for the directory to settle, then create the team. A reported
     failure is re-checked once after a delay; if the team exists after
     all, the row is kept as succeeded with a warning.

Fatal failures stop the row and write exactly one error record. Non-fatal
failures write a record and the row carries on.
"""

import logging
import time
from collections.abc import Callable

from ..error_log import ErrorLog
from ..graph_client import DirectoryClient, GraphError
from ..models import (
    ErrorKind,
    ErrorRecord,
    OutcomeStatus,
    ProvisioningOutcome,
    ProvisionRow,
    ResolvedOwner,
    SourceGroupSnapshot,
    TargetGroup,
)
from .resolver import ResourceResolver, StepError
from .team_settings import team_settings
from .validator import validate_row

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], None]


class ProvisioningPipeline:
    """Runs the provisioning steps for a single row."""

    def __init__(
        self,
        client: DirectoryClient,
        error_log: ErrorLog,
        settle_delay: float = 30.0,
        recheck_delay: float = 30.0,
        sleep: SleepFn = time.sleep,
    ):
        self.client = client
        self.error_log = error_log
        self.resolver = ResourceResolver(client, error_log)
        self.settle_delay = settle_delay
        self.recheck_delay = recheck_delay
        self._sleep = sleep

    def process(self, row: ProvisionRow) -> ProvisioningOutcome:
        """Provision one row. Never raises for remote-call failures."""
        outcome = ProvisioningOutcome(row=row)
        logger.info("[%s]", row.label)

        validation = validate_row(row)
        if not validation.ok:
            return self._abort(outcome, ErrorKind.MISSING_REQUIRED_FIELD, validation.message)

        try:
            owner = self.resolver.resolve_owner(row.owner)
            snapshot = self.resolver.resolve_source_group(row)
        except StepError as e:
            return self._abort(outcome, e.kind, e.message)
        outcome.errors.extend(snapshot.warnings)

        try:
            group = self.resolver.resolve_or_create_target_group(
                row.display_name, row.mail_nickname, row.description
            )
        except StepError as e:
            return self._abort(outcome, e.kind, e.message)

        outcome.group_id = group.id
        outcome.group_created = group.created

        self._assign_owner(row, group, owner, outcome)
        self._copy_members(row, group, snapshot, outcome)

        logger.debug("  Waiting %.0fs for directory changes to settle", self.settle_delay)
        self._sleep(self.settle_delay)

        if not self._create_team(row, group, outcome):
            return outcome

        outcome.status = (
            OutcomeStatus.SUCCEEDED_WITH_WARNINGS if outcome.errors else OutcomeStatus.SUCCEEDED
        )
        return outcome

    def _record(self, outcome: ProvisioningOutcome, kind: ErrorKind, message: str) -> None:
        record = ErrorRecord.for_row(outcome.row, kind, message)
        self.error_log.append(record)
        outcome.errors.append(record)

    def _abort(
        self, outcome: ProvisioningOutcome, kind: ErrorKind, message: str
    ) -> ProvisioningOutcome:
        self._record(outcome, kind, message)
        outcome.status = OutcomeStatus.FAILED
        outcome.failed_kind = kind
        return outcome

    def _assign_owner(
        self,
        row: ProvisionRow,
        group: TargetGroup,
        owner: ResolvedOwner,
        outcome: ProvisioningOutcome,
    ) -> None:
        if not owner.directory_id:
            return
        try:
            self.client.add_group_owner(group.id, owner.directory_id)
            logger.info("  Owner %s assigned", owner.upn)
        except GraphError as e:
            if e.already_exists:
                logger.info("  Owner %s already assigned", owner.upn)
                return
            self._record(
                outcome,
                ErrorKind.OWNER_ASSIGN_FAILED,
                f"Failed to add owner {owner.upn} to group {row.mail_nickname}: {e}",
            )

    def _copy_members(
        self,
        row: ProvisionRow,
        group: TargetGroup,
        snapshot: SourceGroupSnapshot,
        outcome: ProvisioningOutcome,
    ) -> None:
        if not snapshot.members:
            return

        logger.info("  Copying %d member(s) from %s", len(snapshot.members), snapshot.mail)
        for member in snapshot.members:
            try:
                self.client.add_group_member(group.id, member.directory_id)
                outcome.members_added += 1
            except GraphError as e:
                if e.already_exists:
                    outcome.members_already_present += 1
                    continue
                self._record(
                    outcome,
                    ErrorKind.MEMBER_ADD_FAILED,
                    f"Failed to add member {member.directory_id} to group "
                    f"{row.mail_nickname}: {e}",
                )

        logger.info(
            "  Members added: %d, already present: %d",
            outcome.members_added,
            outcome.members_already_present,
        )

    def _create_team(
        self, row: ProvisionRow, group: TargetGroup, outcome: ProvisioningOutcome
    ) -> bool:
        """Create the team; returns False when the row has failed."""
        try:
            team = self.client.create_team(group.id, team_settings())
        except GraphError as create_error:
            logger.warning(
                "  Team creation reported an error, re-checking in %.0fs: %s",
                self.recheck_delay,
                create_error,
            )
            self._sleep(self.recheck_delay)
            try:
                team = self.client.get_team(group.id)
            except GraphError as e:
                logger.debug("  Team re-check failed: %s", e)
                team = None

            if team is None:
                self._abort(
                    outcome,
                    ErrorKind.TEAM_CREATION_FAILED,
                    f"Failed to create team for group {row.mail_nickname}: {create_error}",
                )
                return False

            self._record(
                outcome,
                ErrorKind.TEAM_CREATION_AMBIGUOUS,
                f"Team likely created despite reported error for group "
                f"{row.mail_nickname}: {create_error}",
            )

        outcome.team_id = team.id or group.id
        logger.info("  Team provisioned (id: %s)", outcome.team_id)
        return True
