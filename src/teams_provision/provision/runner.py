"""Sequential batch execution over input rows."""

import logging
import time
from collections.abc import Callable, Iterable

from ..config import ProvisionSettings
from ..error_log import ErrorLog
from ..graph_client import DirectoryClient
from ..input_reader import load_rows
from ..models import ProvisioningOutcome, ProvisionRow
from .pipeline import ProvisioningPipeline, SleepFn

# Outcome callback: (row_index, outcome), row_index starting at 1
OutcomeCallback = Callable[[int, ProvisioningOutcome], None]

logger = logging.getLogger(__name__)


class BatchRunner:
    """Feeds rows one at a time through the provisioning pipeline.

    Rows are independent: a failure in one row never stops the batch, and
    no state is carried between rows apart from the error log.
    """

    def __init__(
        self,
        client: DirectoryClient,
        settings: ProvisionSettings,
        sleep: SleepFn = time.sleep,
    ):
        self.settings = settings
        self.error_log = ErrorLog(settings.error_log_path)
        self.pipeline = ProvisioningPipeline(
            client,
            self.error_log,
            settle_delay=settings.settle_delay_seconds,
            recheck_delay=settings.recheck_delay_seconds,
            sleep=sleep,
        )

    def run(
        self,
        rows: Iterable[ProvisionRow],
        on_outcome: OutcomeCallback | None = None,
    ) -> list[ProvisioningOutcome]:
        """Process every row in order and return one outcome per row."""
        self.error_log.open()
        outcomes: list[ProvisioningOutcome] = []
        for index, row in enumerate(rows, start=1):
            outcome = self.pipeline.process(row)
            outcomes.append(outcome)
            if on_outcome is not None:
                on_outcome(index, outcome)

        failed = sum(1 for o in outcomes if not o.succeeded)
        logger.info(
            "Processed %d row(s): %d failed, %d error record(s) written to %s",
            len(outcomes),
            failed,
            self.error_log.count,
            self.error_log.path,
        )
        return outcomes

    def run_from_input(self, on_outcome: OutcomeCallback | None = None) -> list[ProvisioningOutcome]:
        """Load the configured input file and run every row.

        Raises:
            InputError: If the input file is missing or malformed. No row is
                processed and the error log is left untouched in that case.
        """
        rows = load_rows(self.settings.input_path)
        return self.run(rows, on_outcome=on_outcome)
