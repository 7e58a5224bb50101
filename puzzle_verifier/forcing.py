"""
Forced-reply analysis for strict verification.

A puzzle line is forced when every solver move gives check and, except for
the last one, leaves the opponent exactly one legal reply. Lines that allow
an alternate escape are rejected so the published solution covers every
defence.
"""

from __future__ import annotations

from typing import Optional

from .errors import NotCheck, NotForcedReply
from .rules_engine import RulesSession


def is_solver_ply(index: int) -> bool:
    """True for moves made by the side to move in the start position (0-based index)."""
    return index % 2 == 0


def reply_count(session: RulesSession) -> int:
    return session.legal_move_count()


def forced_reply(session: RulesSession) -> Optional[str]:
    """Return the opponent's only legal reply in SAN, or None if there is a choice (or none)."""
    replies = session.legal_moves()
    if len(replies) == 1:
        return next(iter(replies))
    return None


def check_forcing(session: RulesSession, ply: int, is_last: bool) -> None:
    """
    Validate the position right after a solver move.

    `ply` is the 1-based ply of that move. Raises NotCheck or NotForcedReply.
    """
    if not session.is_check():
        raise NotCheck(f"no check at ply {ply}", ply=ply, fen=session.to_encoding())
    if is_last:
        return
    count = reply_count(session)
    if count != 1:
        raise NotForcedReply(
            f"not forced at ply {ply}, {count} legal replies",
            ply=ply,
            fen=session.to_encoding(),
        )
