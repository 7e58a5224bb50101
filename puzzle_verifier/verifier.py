"""
Puzzle Verifier

Replays a puzzle's solution on a fresh rules session and decides whether it is
a legal line ending in checkmate. In strict mode the line must also be forced:
every solver move gives check and leaves a single legal reply until the last.

Every record-level problem, including unexpected exceptions raised while a
move is applied, ends up in the returned verdict. verify() never raises for a
bad puzzle.
"""

from __future__ import annotations

import logging

from .errors import EngineFault, IllegalMove, NotCheckmate, VerificationError
from .forcing import check_forcing, is_solver_ply
from .puzzle_types import PuzzleRecord, VerificationVerdict
from .rules_engine import RulesSession

logger = logging.getLogger(__name__)


class PuzzleVerifier:
    """
    Checks puzzle records against the rules of chess.

    Holds configuration only; instances can be shared between threads.
    """

    def __init__(self, strict: bool = False, tolerant: bool = True):
        self.strict = strict
        self.tolerant = tolerant

    def __repr__(self) -> str:
        return f"PuzzleVerifier(strict={self.strict}, tolerant={self.tolerant})"

    def verify(self, record: PuzzleRecord) -> VerificationVerdict:
        """Verify one puzzle and return its verdict."""
        try:
            self._replay(record)
        except VerificationError as exc:
            logger.info("Puzzle %s failed: %s", record.id, exc)
            return exc.to_verdict()
        logger.debug("Puzzle %s verified", record.id)
        return VerificationVerdict.success()

    def _replay(self, record: PuzzleRecord) -> None:
        session = RulesSession.parse_position(record.start)
        total = len(record.solution)

        for index, notation in enumerate(record.solution):
            ply = index + 1
            self._apply(session, notation, ply)
            if self.strict and is_solver_ply(index):
                check_forcing(session, ply, is_last=ply == total)

        if not session.is_checkmate():
            raise NotCheckmate("final position is not checkmate", fen=session.to_encoding())

    def _apply(self, session: RulesSession, notation: str, ply: int) -> None:
        fen_before = session.to_encoding()
        try:
            applied = session.apply_move(notation, tolerant=self.tolerant)
        except IllegalMove as exc:
            logger.debug("Ply %d: %s", ply, exc)
            raise IllegalMove(f"illegal move at ply {ply}", ply=ply, fen=fen_before) from exc
        except Exception as exc:
            # Anything else coming out of the rules library is a fault local to this move.
            logger.warning("Engine fault at ply %d (%r): %s", ply, notation, exc)
            raise EngineFault(str(exc) or type(exc).__name__, ply=ply, fen=fen_before) from exc
        logger.debug("Ply %d: %s -> %s", ply, applied.san, applied.fen_after)


def verify_puzzle(record: PuzzleRecord, strict: bool = False) -> VerificationVerdict:
    """Convenience wrapper around PuzzleVerifier.verify."""
    return PuzzleVerifier(strict=strict).verify(record)
