"""Search bookkeeping: per-ply stack entries, root moves and search limits."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .types import MOVE_NONE, VALUE_INFINITE, Color

# Threshold used for countermove based pruning.
COUNTER_MOVE_PRUNE_THRESHOLD = 0


@dataclass
class Stack:
    """Information remembered for one ply of the search tree."""

    pv: list[int] = field(default_factory=list)
    continuation_history: Any = None
    ply: int = 0
    current_move: int = MOVE_NONE
    excluded_move: int = MOVE_NONE
    killers: list[int] = field(default_factory=lambda: [MOVE_NONE, MOVE_NONE])
    static_eval: int = 0
    stat_score: int = 0
    move_count: int = 0
    in_check: bool = False
    tt_pv: bool = False
    tt_hit: bool = False
    double_extensions: int = 0
    cutoff_cnt: int = 0


class RootMove:
    """A move at the root with its score and principal variation.

    Ordering is by descending score, then descending previous score.
    """

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, move: int) -> None:
        self.pv: list[int] = [move]
        self.score = -VALUE_INFINITE
        self.previous_score = -VALUE_INFINITE
        self.average_score = -VALUE_INFINITE
        self.sel_depth = 0
        self.tb_rank = 0
        self.tb_score = 0

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RootMove):
            return self.pv[0] == other.pv[0]
        if isinstance(other, int):
            return self.pv[0] == other
        return NotImplemented

    def __lt__(self, other: RootMove) -> bool:
        if other.score != self.score:
            return other.score < self.score
        return other.previous_score < self.previous_score

    def __repr__(self) -> str:
        return f"RootMove(move={self.pv[0]}, score={self.score})"


@dataclass
class LimitsType:
    """Time, depth and node limits given for a search."""

    searchmoves: list[int] = field(default_factory=list)
    time: list[int] = field(default_factory=lambda: [0, 0])
    inc: list[int] = field(default_factory=lambda: [0, 0])
    npmsec: int = 0
    movetime: int = 0
    start_time: int = 0
    movestogo: int = 0
    depth: int = 0
    mate: int = 0
    perft: int = 0
    infinite: int = 0
    nodes: int = 0

    def use_time_management(self) -> bool:
        return bool(self.time[Color.WHITE] or self.time[Color.BLACK])