"""Mandatory-field checks for input rows."""

from dataclasses import dataclass

from ..models import ProvisionRow

REQUIRED_FIELDS = (
    ("display_name", "DisplayName"),
    ("mail_nickname", "MailNickName"),
)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one row."""

    missing: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.missing

    @property
    def message(self) -> str:
        if self.ok:
            return ""
        return f"Missing required field(s): {', '.join(self.missing)}"


def validate_row(row: ProvisionRow) -> ValidationResult:
    """Check that a row carries every mandatory field. No side effects."""
    missing = tuple(
        column for attr, column in REQUIRED_FIELDS if not getattr(row, attr).strip()
    )
    return ValidationResult(missing=missing)
