"""
Chess Puzzle Verification Module

Checks that catalog puzzles are legal lines ending in checkmate, and in strict
mode that they are fully forced. Move legality and mate detection come from
python-chess; this package only layers the puzzle contract on top.

No search, no evaluation - purely rule-based.
"""

from .puzzle_types import (
    Bucket,
    FailureKind,
    PuzzleRecord,
    PuzzleReport,
    VerificationReport,
    VerificationVerdict,
)
from .errors import (
    EngineFault,
    IllegalMove,
    InvalidStartPosition,
    MalformedCatalog,
    NotCheck,
    NotCheckmate,
    NotForcedReply,
    PuzzleVerifierError,
    VerificationError,
)
from .rules_engine import AppliedMove, RulesSession
from .verifier import PuzzleVerifier, verify_puzzle
from .catalog import PuzzleCatalog, load_catalog
from .runner import verify_catalog, verify_records
from .solution_line import (
    Hint,
    SolutionCheck,
    check_solution,
    get_hint,
    hash_solution,
    is_solution_complete,
    moves_equal,
    split_solution,
)

__all__ = [
    # Types
    "Bucket",
    "FailureKind",
    "PuzzleRecord",
    "PuzzleReport",
    "VerificationReport",
    "VerificationVerdict",
    # Errors
    "EngineFault",
    "IllegalMove",
    "InvalidStartPosition",
    "MalformedCatalog",
    "NotCheck",
    "NotCheckmate",
    "NotForcedReply",
    "PuzzleVerifierError",
    "VerificationError",
    # Rules engine
    "AppliedMove",
    "RulesSession",
    # Verification
    "PuzzleVerifier",
    "verify_puzzle",
    "PuzzleCatalog",
    "load_catalog",
    "verify_catalog",
    "verify_records",
    # Solution helpers
    "Hint",
    "SolutionCheck",
    "check_solution",
    "get_hint",
    "hash_solution",
    "is_solution_complete",
    "moves_equal",
    "split_solution",
]
