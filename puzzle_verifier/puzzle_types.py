"""
Puzzle Data Types and Schemas

Defines the data structures shared by the catalog, the verifier and the runner.
All types are immutable once built and serializable to the catalog file format.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple
import json


class Bucket(str, Enum):
    """
    Difficulty buckets of the puzzle catalog.

    The order of declaration is the order buckets appear in catalog files
    and the order the catalog iterates them.
    """
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    EXPERT = "expert"


BUCKET_ORDER: Tuple[Bucket, ...] = (Bucket.BEGINNER, Bucket.INTERMEDIATE, Bucket.EXPERT)


class FailureKind(str, Enum):
    """Why a puzzle failed verification."""
    INVALID_START = "invalid_start"
    ILLEGAL_MOVE = "illegal_move"
    ENGINE_FAULT = "engine_fault"
    NOT_CHECK = "not_check"
    NOT_FORCED = "not_forced"
    NOT_CHECKMATE = "not_checkmate"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class PuzzleRecord:
    """
    A single catalog puzzle.

    `solution` alternates solver moves and opponent replies, starting with
    the side to move in `start`.
    """
    # Unique identifier inside the catalog, e.g. "b1", "i7"
    id: str

    bucket: Bucket

    # FEN of the puzzle position
    start: str

    # SAN moves (sloppy notation tolerated)
    solution: Tuple[str, ...]

    # Optional display metadata carried through from the catalog file
    description: Optional[str] = None
    source: Optional[dict] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not self.solution:
            raise ValueError(f"Puzzle {self.id!r} has an empty solution")
        if not isinstance(self.solution, tuple):
            object.__setattr__(self, "solution", tuple(self.solution))
        if not isinstance(self.bucket, Bucket):
            object.__setattr__(self, "bucket", Bucket(self.bucket))

    @property
    def plies(self) -> int:
        return len(self.solution)

    def to_dict(self) -> dict:
        """Convert to the catalog file representation."""
        data: dict[str, Any] = {
            "id": self.id,
            "fen": self.start,
            "solution": list(self.solution),
        }
        if self.description is not None:
            data["description"] = self.description
        data["difficulty"] = self.bucket.value
        if self.source is not None:
            data["source"] = dict(self.source)
        return data

    @classmethod
    def from_dict(cls, data: dict, bucket: Bucket | str) -> PuzzleRecord:
        """Create a record from one catalog entry."""
        return cls(
            id=data["id"],
            bucket=Bucket(bucket),
            start=data["fen"],
            solution=tuple(data["solution"]),
            description=data.get("description"),
            source=data.get("source"),
        )


@dataclass(frozen=True)
class VerificationVerdict:
    """
    Outcome of verifying one puzzle.

    `failed_at_ply` is 1-based; 0 means the start position itself was rejected.
    `fen` is the position at the point of failure, for diagnostics.
    """
    ok: bool
    reason: Optional[str] = None
    failed_at_ply: Optional[int] = None
    kind: Optional[FailureKind] = None
    fen: Optional[str] = None

    @classmethod
    def success(cls) -> VerificationVerdict:
        return cls(ok=True)

    @classmethod
    def failure(
        cls,
        reason: str,
        kind: FailureKind,
        failed_at_ply: Optional[int] = None,
        fen: Optional[str] = None,
    ) -> VerificationVerdict:
        return cls(ok=False, reason=reason, failed_at_ply=failed_at_ply, kind=kind, fen=fen)

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "reason": self.reason,
            "failed_at_ply": self.failed_at_ply,
            "kind": self.kind.value if self.kind else None,
            "fen": self.fen,
        }


@dataclass(frozen=True)
class PuzzleReport:
    """A record paired with its verdict."""
    record: PuzzleRecord
    verdict: VerificationVerdict

    def line(self) -> str:
        """Render the one-line CLI status for this puzzle."""
        label = f"{self.record.id} ({self.record.bucket.value})"
        if self.verdict.ok:
            return f"[OK] {label}"
        return f"[FAIL] {label}: {self.verdict.reason}"


@dataclass
class VerificationReport:
    """
    Aggregated result of a verification run.

    Reports keep catalog order regardless of how the run was scheduled.
    """
    reports: List[PuzzleReport] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.reports)

    @property
    def failures(self) -> List[PuzzleReport]:
        return [r for r in self.reports if not r.verdict.ok]

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def passed(self) -> int:
        return self.total - self.failed

    @property
    def all_ok(self) -> bool:
        return self.failed == 0

    @property
    def exit_code(self) -> int:
        return 0 if self.all_ok else 1

    def summary_line(self) -> str:
        if self.all_ok:
            return "All puzzles verified."
        return f"{self.failed} of {self.total} puzzles failed verification."

    def to_dict(self) -> dict:
        return {
            "all_ok": self.all_ok,
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "puzzles": [
                {
                    "id": r.record.id,
                    "bucket": r.record.bucket.value,
                    **r.verdict.to_dict(),
                }
                for r in self.reports
            ],
        }

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=2)
