"""
Solution line helpers.

Utilities for working with a puzzle's stored solution once it has been
verified: splitting it into solver moves and replies, checking a solver's
partial attempt against it, producing hints, and hashing it for commitment.

Comparisons are loose on purpose: "0-0" equals "O-O", check/mate markers and
case are ignored, and coordinate moves may be written "e2-e4" or "e2e4".
"""

from __future__ import annotations

from dataclasses import dataclass
import hashlib
import re
from typing import List, Optional, Sequence, Tuple

import chess

from .errors import IllegalMove, VerificationError
from .rules_engine import RulesSession

COORD_RE = re.compile(r"^[a-h][1-8]-?[a-h][1-8](?:=?[qrbn])?$", re.I)


@dataclass(frozen=True)
class SolutionCheck:
    match: bool
    mismatch_index: Optional[int] = None


@dataclass(frozen=True)
class Hint:
    san: str
    uci: str
    from_square: str
    to_square: str


def split_solution(solution: Sequence[str]) -> Tuple[List[str], List[str]]:
    """
    Split solution moves into solver moves and opponent responses.

    Args:
        solution: Full solution line [p1, o1, p2, o2, p3, ...]

    Returns:
        (solver_moves, opponent_responses) where indices align:
        solver_moves[i] is followed by opponent_responses[i] (if exists)
    """
    return list(solution[::2]), list(solution[1::2])


def _normalize_san(text: str) -> str:
    text = re.sub(r"\s+", "", text.strip())
    text = text.replace("0-0-0", "O-O-O").replace("0-0", "O-O")
    text = re.sub(r"[+#]+$", "", text)
    return text.lower()


def _normalize_coord(text: str) -> str:
    return re.sub(r"\s+", "", text.strip()).replace("-", "").replace("=", "").lower()


def moves_equal(a: str, b: str) -> bool:
    """Loosely compare two move strings (SAN or coordinate)."""
    if a == b:
        return True
    if _normalize_san(a) == _normalize_san(b):
        return True
    if COORD_RE.match(a.strip()) and COORD_RE.match(b.strip()):
        return _normalize_coord(a) == _normalize_coord(b)
    return False


def check_solution(current_moves: Sequence[str], solution: Sequence[str]) -> SolutionCheck:
    """Check that a (possibly partial) attempt follows the stored solution."""
    for i, move in enumerate(current_moves):
        if i >= len(solution):
            return SolutionCheck(match=False, mismatch_index=i)
        expected = solution[i]
        if not isinstance(move, str) or not isinstance(expected, str):
            return SolutionCheck(match=False, mismatch_index=i)
        if not moves_equal(move, expected):
            return SolutionCheck(match=False, mismatch_index=i)
    return SolutionCheck(match=True)


def is_solution_complete(current_moves: Sequence[str], solution: Sequence[str]) -> bool:
    return check_solution(current_moves, solution).match and len(current_moves) == len(solution)


def get_hint(fen: str, solution: Sequence[str], index: int) -> Optional[Hint]:
    """
    Return the legal move expected at `index` of the solution.

    The solution is replayed from `fen` up to `index` first, with the same
    notation tolerance the verifier uses. Returns None if the index is out of
    range or the stored line cannot be replayed.
    """
    if index < 0 or index >= len(solution):
        return None
    try:
        session = RulesSession.parse_position(fen)
        for notation in solution[:index]:
            session.apply_move(notation)
    except VerificationError:
        return None

    expected = solution[index]
    try:
        move = session.resolve_move(expected)
    except IllegalMove:
        # Fall back to the loose comparison ("qg7", "0-0+")
        matches = [san for san in session.legal_moves() if moves_equal(san, expected)]
        if len(matches) != 1:
            return None
        move = session.resolve_move(matches[0])

    return Hint(
        san=session.san(move),
        uci=move.uci(),
        from_square=chess.square_name(move.from_square),
        to_square=chess.square_name(move.to_square),
    )


def hash_solution(moves: Sequence[str]) -> str:
    """SHA-256 commitment of a solution line, hex encoded with a 0x prefix."""
    digest = hashlib.sha256(" ".join(moves).encode("utf-8")).hexdigest()
    return "0x" + digest
