"""
Rules Engine capability.

Thin session object around a python-chess Board. Move generation, check and
checkmate detection all come from python-chess; this module only adds the
notation handling puzzles need (sloppy SAN, annotation suffixes, coordinate
moves) and maps python-chess errors onto the verification error taxonomy.

A session owns its board exclusively. Sessions are cheap; the verifier opens
a fresh one for every puzzle.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import re
from typing import Set

import chess

from .errors import IllegalMove, InvalidStartPosition

logger = logging.getLogger(__name__)

# "!", "?", "!!", "?!", ... after the move. Check/mate markers are left to parse_san.
ANNOTATION_RE = re.compile(r"[!?]+$")


@dataclass(frozen=True)
class AppliedMove:
    """Descriptor of a move executed by a session."""
    san: str
    uci: str
    fen_after: str


class RulesSession:
    """Owns one position and applies moves to it."""

    def __init__(self, board: chess.Board):
        self._board = board

    @classmethod
    def parse_position(cls, encoding: str) -> RulesSession:
        """
        Open a session at a FEN.

        Raises InvalidStartPosition if the FEN does not parse or describes an
        impossible position (missing kings, side not to move in check, ...).
        """
        if not isinstance(encoding, str) or not encoding.strip():
            raise InvalidStartPosition("invalid starting position", ply=0)
        try:
            board = chess.Board(encoding.strip())
        except ValueError as exc:
            raise InvalidStartPosition("invalid starting position", ply=0) from exc
        if not board.is_valid():
            logger.debug("Rejected position %s: status %r", encoding, board.status())
            raise InvalidStartPosition("invalid starting position", ply=0, fen=encoding)
        return cls(board)

    @property
    def turn(self) -> chess.Color:
        return self._board.turn

    def _resolve(self, notation: str, tolerant: bool) -> chess.Move:
        board = self._board
        text = notation.strip()
        if tolerant:
            text = ANNOTATION_RE.sub("", text)
        if not text:
            raise IllegalMove(f"empty move in {board.fen()}", fen=board.fen())

        # Try SAN first
        try:
            move = board.parse_san(text)
        except chess.AmbiguousMoveError as exc:
            raise IllegalMove(f"ambiguous move {notation!r}", fen=board.fen()) from exc
        except chess.IllegalMoveError as exc:
            raise IllegalMove(f"illegal move {notation!r}", fen=board.fen()) from exc
        except chess.InvalidMoveError as exc:
            if not tolerant:
                raise IllegalMove(f"could not parse move {notation!r}", fen=board.fen()) from exc
            # Try UCI
            try:
                move = board.parse_uci(text.lower())
            except ValueError:
                raise IllegalMove(f"could not parse move {notation!r}", fen=board.fen()) from exc

        # parse_san maps "--" and friends to a null move
        if not move:
            raise IllegalMove(f"null move {notation!r}", fen=board.fen())
        if not tolerant and board.san(move) != notation:
            raise IllegalMove(
                f"{notation!r} is not canonical SAN (expected {board.san(move)!r})",
                fen=board.fen(),
            )
        return move

    def resolve_move(self, notation: str, tolerant: bool = True) -> chess.Move:
        """Match a notation to a legal move without playing it. Raises IllegalMove."""
        return self._resolve(notation, tolerant)

    def san(self, move: chess.Move) -> str:
        return self._board.san(move)

    def apply_move(self, notation: str, tolerant: bool = True) -> AppliedMove:
        """
        Execute a move given in algebraic notation.

        With `tolerant` set, over- or under-specified disambiguation, "0-0"
        castling, coordinate moves and trailing annotations are accepted as
        long as exactly one legal move matches. Without it, the notation must
        be the move's canonical SAN.

        Raises IllegalMove if no legal move (or more than one) matches.
        """
        move = self._resolve(notation, tolerant)
        san = self._board.san(move)
        self._board.push(move)
        return AppliedMove(san=san, uci=move.uci(), fen_after=self._board.fen())

    def legal_moves(self) -> Set[str]:
        """SAN of every legal move in the current position."""
        board = self._board
        return {board.san(m) for m in board.legal_moves}

    def legal_move_count(self) -> int:
        return self._board.legal_moves.count()

    def is_check(self) -> bool:
        return self._board.is_check()

    def is_checkmate(self) -> bool:
        return self._board.is_checkmate()

    def to_encoding(self) -> str:
        return self._board.fen()
