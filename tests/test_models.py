"""Tests for domain models."""

from conftest import make_row

from teams_provision.models import (
    BatchSummary,
    ErrorKind,
    ErrorRecord,
    OutcomeStatus,
    ProvisioningOutcome,
    ProvisionRow,
)


def test_fatal_kinds():
    fatal = {kind for kind in ErrorKind if kind.fatal}
    assert fatal == {
        ErrorKind.MISSING_REQUIRED_FIELD,
        ErrorKind.OWNER_NOT_FOUND,
        ErrorKind.SOURCE_GROUP_NOT_FOUND,
        ErrorKind.EMPTY_GROUP_REFERENCE,
        ErrorKind.GROUP_CREATION_FAILED,
        ErrorKind.TEAM_CREATION_FAILED,
    }


def test_row_accepts_csv_headers_and_strips():
    row = ProvisionRow.model_validate(
        {"MailNickName": " nick ", "DisplayName": "Name", "SourceM365Group": None}
    )
    assert row.mail_nickname == "nick"
    assert row.source_group_mail == ""
    assert row.label == "nick"


def test_row_label_includes_line_number():
    assert make_row(line_number=4).label == "line 4 (class7a-math)"


def test_error_record_carries_row_identity():
    row = make_row(source_group_mail="old@x.edu")
    record = ErrorRecord.for_row(row, ErrorKind.MEMBER_ADD_FAILED, "boom")
    assert record.as_csv_row() == [
        "t@x.edu",
        "class7a-math",
        "Class 7a Math",
        "old@x.edu",
        "boom",
    ]


def test_batch_summary():
    warning = ErrorRecord.for_row(make_row(), ErrorKind.MEMBER_ADD_FAILED, "m2")
    failure = ErrorRecord.for_row(make_row(), ErrorKind.OWNER_NOT_FOUND, "gone")
    outcomes = [
        ProvisioningOutcome(
            row=make_row(), group_id="g1", group_created=True, team_id="g1", members_added=3
        ),
        ProvisioningOutcome(
            row=make_row(),
            status=OutcomeStatus.SUCCEEDED_WITH_WARNINGS,
            group_id="g2",
            team_id="g2",
            members_added=1,
            errors=[warning],
        ),
        ProvisioningOutcome(
            row=make_row(),
            status=OutcomeStatus.FAILED,
            failed_kind=ErrorKind.OWNER_NOT_FOUND,
            errors=[failure],
        ),
    ]

    summary = BatchSummary.from_outcomes(outcomes)

    assert (summary.rows, summary.succeeded, summary.succeeded_with_warnings, summary.failed) == (
        3,
        1,
        1,
        1,
    )
    assert summary.groups_created == 1
    assert summary.groups_existing == 1
    assert summary.teams_provisioned == 2
    assert summary.members_added == 4
    assert summary.error_records == 2
    assert not summary.success
    assert outcomes[1].warnings == [warning]
    assert outcomes[2].aborted
