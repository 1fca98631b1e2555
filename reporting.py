"""User-facing output of cleanup progress."""

import sys
from typing import TextIO

from error_handler import ErrorSeverity
from logging_config import get_logger
from models import StepOutcome

logger = get_logger(__name__)


class ConsoleReporter:
    """Prints each step outcome as it is reported and mirrors it to the log."""

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream

    def __call__(self, outcome: StepOutcome) -> None:
        stream = self.stream or sys.stdout
        if outcome.severity == ErrorSeverity.WARNING:
            print(f"Warning: {outcome.message}", file=stream)
            logger.warning(f"[{outcome.step.value}] {outcome.message}")
        else:
            print(outcome.message, file=stream)
            logger.info(f"[{outcome.step.value}] {outcome.message}")
        stream.flush()
