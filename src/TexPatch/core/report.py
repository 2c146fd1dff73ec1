"""Per-asset outcomes, batch report and error summary aggregation."""

import enum
import logging
from dataclasses import dataclass, field
from typing import List, Optional

logger = logging.getLogger("texpatch")

DEFAULT_MAX_ERROR_LINES = 20


class OutcomeKind(enum.Enum):
    """Tag of a per-asset outcome."""

    SUCCESS = "success"
    READ_FAILURE = "read_failure"
    DECODE_FAILURE = "decode_failure"
    IMPORT_FAILURE = "import_failure"
    REENCODE_FAILURE = "reencode_failure"
    WRITE_FAILURE = "write_failure"


@dataclass(frozen=True)
class AssetOutcome:
    """Result of editing one asset."""

    asset: str
    kind: OutcomeKind
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    def to_line(self) -> str:
        return f"[{self.asset}]: {self.message}"


@dataclass
class BatchReport:
    """Ordered outcomes of one batch run."""

    outcomes: List[AssetOutcome] = field(default_factory=list)

    def add(self, outcome: AssetOutcome) -> None:
        self.outcomes.append(outcome)

    @property
    def successes(self) -> List[AssetOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failures(self) -> List[AssetOutcome]:
        return [o for o in self.outcomes if not o.ok]

    def count(self, kind: OutcomeKind) -> int:
        return sum(1 for o in self.outcomes if o.kind is kind)

    def to_dict(self) -> dict:
        return {
            "total": len(self.outcomes),
            "succeeded": len(self.successes),
            "failed": len(self.failures),
            "outcomes": [
                {"asset": o.asset, "kind": o.kind.value, "message": o.message}
                for o in self.outcomes
            ],
        }


class ErrorAggregator:
    """Append-only collector of failure lines for the end-of-batch summary."""

    def __init__(self, max_lines: int = DEFAULT_MAX_ERROR_LINES):
        if max_lines < 1:
            raise ValueError("max_lines must be >= 1")
        self.max_lines = max_lines
        self._lines: List[str] = []

    def record_outcome(self, outcome: AssetOutcome) -> None:
        if not outcome.ok:
            self._lines.append(outcome.to_line())

    def __len__(self) -> int:
        return len(self._lines)

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    def summary(self) -> Optional[str]:
        """Return at most ``max_lines`` display lines, or None if nothing failed.

        Messages spanning several lines (e.g. exception text) count once per
        physical line; everything past the limit is dropped.
        """
        if not self._lines:
            return None
        physical = "\n".join(self._lines).splitlines()
        dropped = len(physical) - self.max_lines
        if dropped > 0:
            logger.debug("Error summary truncated: %d line(s) dropped", dropped)
        return "\n".join(physical[:self.max_lines])
