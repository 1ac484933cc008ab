"""Row-by-row provisioning of groups and teams."""

from .pipeline import ProvisioningPipeline
from .resolver import ResourceResolver, StepError
from .runner import BatchRunner, OutcomeCallback
from .team_settings import team_settings
from .validator import ValidationResult, validate_row

__all__ = [
    "BatchRunner",
    "OutcomeCallback",
    "ProvisioningPipeline",
    "ResourceResolver",
    "StepError",
    "ValidationResult",
    "team_settings",
    "validate_row",
]
