"""Domain models for a provisioning run."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

_FATAL_KINDS = {
    "MissingRequiredField",
    "OwnerNotFound",
    "SourceGroupNotFound",
    "EmptyGroupReference",
    "GroupCreationFailed",
    "TeamCreationFailed",
}


class ErrorKind(str, Enum):
    """Failure kinds a row can hit while being provisioned."""

    MISSING_REQUIRED_FIELD = "MissingRequiredField"
    OWNER_NOT_FOUND = "OwnerNotFound"
    SOURCE_GROUP_NOT_FOUND = "SourceGroupNotFound"
    SOURCE_GROUP_MEMBER_READ_FAILED = "SourceGroupMemberReadFailed"
    EMPTY_GROUP_REFERENCE = "EmptyGroupReference"
    GROUP_CREATION_FAILED = "GroupCreationFailed"
    OWNER_ASSIGN_FAILED = "OwnerAssignFailed"
    MEMBER_ADD_FAILED = "MemberAddFailed"
    TEAM_CREATION_FAILED = "TeamCreationFailed"
    TEAM_CREATION_AMBIGUOUS = "TeamCreationAmbiguous"

    @property
    def fatal(self) -> bool:
        """Whether this kind aborts the rest of the row."""
        return self.value in _FATAL_KINDS


class OutcomeStatus(str, Enum):
    """Terminal state of a processed row."""

    SUCCEEDED = "succeeded"
    SUCCEEDED_WITH_WARNINGS = "succeeded_with_warnings"
    FAILED = "failed"


class ProvisionRow(BaseModel):
    """One input row: a class group to provision."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    owner: str = Field(default="", alias="Owner")
    mail_nickname: str = Field(default="", alias="MailNickName")
    section_number: str = Field(default="", alias="SectionNumber")
    description: str = Field(default="", alias="Description")
    course_name: str = Field(default="", alias="CourseName")
    display_name: str = Field(default="", alias="DisplayName")
    source_group_mail: str = Field(default="", alias="SourceM365Group")
    line_number: int | None = None

    @field_validator(
        "owner",
        "mail_nickname",
        "section_number",
        "description",
        "course_name",
        "display_name",
        "source_group_mail",
        mode="before",
    )
    @classmethod
    def _strip(cls, value: object) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @property
    def label(self) -> str:
        """Short identifier for log lines."""
        name = self.mail_nickname or self.display_name or "<unnamed>"
        if self.line_number is not None:
            return f"line {self.line_number} ({name})"
        return name


class ResolvedOwner(BaseModel):
    """Owner identity after directory lookup."""

    model_config = ConfigDict(frozen=True)

    upn: str = ""
    directory_id: str | None = None


class MemberRef(BaseModel):
    """Reference to a directory object that belongs to a group."""

    model_config = ConfigDict(frozen=True)

    directory_id: str


class TargetGroup(BaseModel):
    """The unified group a row provisions into."""

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str = ""
    mail_nickname: str = ""
    created: bool = False


class ErrorRecord(BaseModel):
    """One line of the error log."""

    model_config = ConfigDict(frozen=True)

    owner: str = ""
    mail_nickname: str = ""
    display_name: str = ""
    source_group_mail: str = ""
    message: str
    kind: ErrorKind

    @classmethod
    def for_row(cls, row: ProvisionRow, kind: ErrorKind, message: str) -> ErrorRecord:
        """Build a record carrying the identifying fields of *row*."""
        return cls(
            owner=row.owner,
            mail_nickname=row.mail_nickname,
            display_name=row.display_name,
            source_group_mail=row.source_group_mail,
            message=message,
            kind=kind,
        )

    def as_csv_row(self) -> list[str]:
        return [
            self.owner,
            self.mail_nickname,
            self.display_name,
            self.source_group_mail,
            self.message,
        ]


class SourceGroupSnapshot(BaseModel):
    """Source group and the members to copy from it.

    ``warnings`` holds the non-fatal records already written to the error log
    while the snapshot was taken.
    """

    model_config = ConfigDict(frozen=True)

    mail: str = ""
    group_id: str | None = None
    members: tuple[MemberRef, ...] = ()
    warnings: tuple[ErrorRecord, ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.group_id is None


@dataclass
class ProvisioningOutcome:
    """Result of running one row through the pipeline."""

    row: ProvisionRow
    status: OutcomeStatus = OutcomeStatus.SUCCEEDED
    failed_kind: ErrorKind | None = None
    group_id: str | None = None
    group_created: bool = False
    team_id: str | None = None
    members_added: int = 0
    members_already_present: int = 0
    errors: list[ErrorRecord] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status != OutcomeStatus.FAILED

    @property
    def aborted(self) -> bool:
        return self.failed_kind is not None

    @property
    def warnings(self) -> list[ErrorRecord]:
        return [e for e in self.errors if not e.kind.fatal]


@dataclass
class BatchSummary:
    """Accumulates batch statistics for the final report."""

    rows: int = 0
    succeeded: int = 0
    succeeded_with_warnings: int = 0
    failed: int = 0
    groups_created: int = 0
    groups_existing: int = 0
    teams_provisioned: int = 0
    members_added: int = 0
    error_records: int = 0

    @classmethod
    def from_outcomes(cls, outcomes: list[ProvisioningOutcome]) -> BatchSummary:
        summary = cls()
        for outcome in outcomes:
            summary.rows += 1
            summary.error_records += len(outcome.errors)
            summary.members_added += outcome.members_added
            if outcome.status == OutcomeStatus.SUCCEEDED:
                summary.succeeded += 1
            elif outcome.status == OutcomeStatus.SUCCEEDED_WITH_WARNINGS:
                summary.succeeded_with_warnings += 1
            else:
                summary.failed += 1
            if outcome.group_id:
                if outcome.group_created:
                    summary.groups_created += 1
                else:
                    summary.groups_existing += 1
            if outcome.team_id:
                summary.teams_provisioned += 1
        return summary

    @property
    def success(self) -> bool:
        return self.failed == 0
