"""
Catalog builder.

Turns a Lichess puzzle database export (CSV with PuzzleId, FEN, Moves, Themes
columns) into a bucketed catalog of mate puzzles:

- mateIn1          -> beginner
- mateIn2          -> intermediate
- mateIn3, mateIn4 -> expert

Lichess stores the position *before* the opponent's last move, with that move
first in the Moves column. By default the builder plays it and stores the
resulting position, so every catalog line starts with the solver's move.
Rows with an illegal move or a line that does not end in checkmate are skipped.
"""

from __future__ import annotations

import logging
from pathlib import Path
from collections.abc import Iterable
from typing import Dict, List, Optional, Union

import chess
import pandas as pd

from .catalog import PuzzleCatalog
from .errors import MalformedCatalog
from .puzzle_types import BUCKET_ORDER, Bucket, PuzzleRecord

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("PuzzleId", "FEN", "Moves", "Themes")

THEME_BUCKETS = (
    ("mateIn1", Bucket.BEGINNER),
    ("mateIn2", Bucket.INTERMEDIATE),
    ("mateIn3", Bucket.EXPERT),
    ("mateIn4", Bucket.EXPERT),
)

ID_PREFIX = {
    Bucket.BEGINNER: "b",
    Bucket.INTERMEDIATE: "i",
    Bucket.EXPERT: "e",
}


def _themes(value) -> List[str]:
    if isinstance(value, str):
        return value.split()
    if isinstance(value, Iterable):
        return [str(t) for t in value]
    return []


def bucket_for_themes(themes) -> Optional[Bucket]:
    """Map Lichess themes to a bucket; None if the puzzle is not a short mate."""
    tags = set(_themes(themes))
    for theme, bucket in THEME_BUCKETS:
        if theme in tags:
            return bucket
    return None


def uci_line_to_san(fen: str, uci_moves: str, keep_setup_move: bool = False) -> Optional[tuple[str, List[str]]]:
    """
    Replay a space separated UCI line and return (start_fen, san_moves).

    Returns None when a move is illegal or the line does not end in mate.
    """
    try:
        board = chess.Board(fen)
        moves = [chess.Move.from_uci(u) for u in uci_moves.split()]
    except ValueError:
        return None
    if not moves:
        return None

    if not keep_setup_move:
        setup, moves = moves[0], moves[1:]
        if setup not in board.legal_moves or not moves:
            return None
        board.push(setup)

    start_fen = board.fen()
    sans: List[str] = []
    for move in moves:
        if move not in board.legal_moves:
            return None
        sans.append(board.san(move))
        board.push(move)

    if not board.is_checkmate():
        return None
    return start_fen, sans


def _description(puzzle_id: str, themes) -> str:
    n = ""
    for t in _themes(themes):
        if t.startswith("mateIn"):
            n = t[len("mateIn"):]
            break
    return f"Lichess {puzzle_id}: Mate in {n}".rstrip()


def build_catalog(
    rows: Union[pd.DataFrame, str, Path],
    per_bucket: Optional[int] = 20,
    keep_setup_move: bool = False,
) -> PuzzleCatalog:
    """
    Build a catalog from a Lichess puzzle DataFrame or CSV path.

    `per_bucket` caps how many puzzles each bucket receives (None = no cap).
    """
    df = rows if isinstance(rows, pd.DataFrame) else pd.read_csv(rows)
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise MalformedCatalog(f"Puzzle export is missing columns: {', '.join(missing)}")

    buckets: Dict[Bucket, List[PuzzleRecord]] = {b: [] for b in BUCKET_ORDER}
    skipped = 0

    for _, row in df.iterrows():
        if per_bucket is not None and all(len(v) >= per_bucket for v in buckets.values()):
            break

        bucket = bucket_for_themes(row["Themes"])
        if bucket is None:
            continue
        if per_bucket is not None and len(buckets[bucket]) >= per_bucket:
            continue

        converted = uci_line_to_san(str(row["FEN"]), str(row["Moves"]), keep_setup_move=keep_setup_move)
        if converted is None:
            skipped += 1
            continue
        start_fen, sans = converted

        puzzle_id = str(row["PuzzleId"])
        source = {"dataset": "Lichess chess-puzzles", "puzzleId": puzzle_id}
        url = row.get("GameUrl", row.get("PuzzleUrl"))
        if isinstance(url, str) and url:
            source["url"] = url

        records = buckets[bucket]
        records.append(
            PuzzleRecord(
                id=f"{ID_PREFIX[bucket]}{len(records) + 1}",
                bucket=bucket,
                start=start_fen,
                solution=tuple(sans),
                description=_description(puzzle_id, row["Themes"]),
                source=source,
            )
        )

    if skipped:
        logger.info("Skipped %d rows with illegal or non-mating lines", skipped)
    if per_bucket is not None:
        short = {b.value: len(v) for b, v in buckets.items() if len(v) < per_bucket}
        if short:
            logger.warning("Incomplete buckets: %s", short)

    return PuzzleCatalog(buckets)
