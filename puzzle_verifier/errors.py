"""
Error taxonomy for puzzle verification.

Only MalformedCatalog is fatal to a run. Every VerificationError subclass is
record-level: the verifier converts it into a failed verdict and the run
continues with the next puzzle.
"""

from __future__ import annotations

from typing import List, Optional

from .puzzle_types import FailureKind, VerificationVerdict


class PuzzleVerifierError(Exception):
    """Base class for all errors raised by this package."""


class MalformedCatalog(PuzzleVerifierError, ValueError):
    """The catalog data is not valid structured data or a record is incomplete."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = list(errors or [])

    def __str__(self) -> str:
        base = super().__str__()
        if not self.errors:
            return base
        return base + "\n" + "\n".join(f"  - {e}" for e in self.errors)


class VerificationError(PuzzleVerifierError):
    """A record-level failure, convertible into a verdict."""

    kind: FailureKind = FailureKind.ENGINE_FAULT

    def __init__(self, message: str, ply: Optional[int] = None, fen: Optional[str] = None):
        super().__init__(message)
        self.ply = ply
        self.fen = fen

    def to_verdict(self) -> VerificationVerdict:
        return VerificationVerdict.failure(
            str(self),
            self.kind,
            failed_at_ply=self.ply,
            fen=self.fen,
        )


class InvalidStartPosition(VerificationError):
    kind = FailureKind.INVALID_START


class IllegalMove(VerificationError):
    kind = FailureKind.ILLEGAL_MOVE


class EngineFault(VerificationError):
    kind = FailureKind.ENGINE_FAULT


class NotCheck(VerificationError):
    kind = FailureKind.NOT_CHECK


class NotForcedReply(VerificationError):
    kind = FailureKind.NOT_FORCED


class NotCheckmate(VerificationError):
    kind = FailureKind.NOT_CHECKMATE
