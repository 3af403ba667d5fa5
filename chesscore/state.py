"""Hash keys, the upcoming-repetition cuckoo table and per-move state records."""

from __future__ import annotations

from dataclasses import dataclass, field

from .board import attacks_bb
from .types import (
    MOVE_NONE,
    PIECES,
    SQ_NONE,
    Piece,
    PieceType,
    make_move,
    piece_type,
)

_MASK64 = (1 << 64) - 1

ZOBRIST_SEED = 1070372
CUCKOO_SIZE = 8192


class Prng:
    """Xorshift64* pseudo random number generator producing 64-bit values."""

    def __init__(self, seed: int) -> None:
        seed &= _MASK64
        if not seed:
            raise ValueError("seed must be non-zero")
        self._state = seed

    def rand(self) -> int:
        s = self._state
        s ^= s >> 12
        s ^= (s << 25) & _MASK64
        s ^= s >> 27
        self._state = s
        return (s * 2685821657736338717) & _MASK64


@dataclass(frozen=True)
class Zobrist:
    """Random keys used to hash positions."""

    psq: tuple[tuple[int, ...], ...]
    enpassant: tuple[int, ...]
    castling: tuple[int, ...]
    side: int
    no_pawns: int


def generate_zobrist(seed: int = ZOBRIST_SEED) -> Zobrist:
    """Draw the hash keys from a generator seeded with ``seed``."""
    rng = Prng(seed)
    psq = [[0] * 64 for _ in range(16)]
    for pc in PIECES:
        for s in range(64):
            psq[pc][s] = rng.rand()
    enpassant = tuple(rng.rand() for _ in range(8))
    castling = tuple(rng.rand() for _ in range(16))
    side = rng.rand()
    no_pawns = rng.rand()
    return Zobrist(
        psq=tuple(tuple(row) for row in psq),
        enpassant=enpassant,
        castling=castling,
        side=side,
        no_pawns=no_pawns,
    )


def _h1(key: int) -> int:
    return key & 0x1FFF


def _h2(key: int) -> int:
    return (key >> 16) & 0x1FFF


@dataclass
class CuckooTable:
    """Keys of reversible moves and the moves themselves, in a cuckoo hash."""

    keys: list[int] = field(default_factory=lambda: [0] * CUCKOO_SIZE)
    moves: list[int] = field(default_factory=lambda: [MOVE_NONE] * CUCKOO_SIZE)
    count: int = 0

    def lookup(self, key: int) -> int | None:
        """Return the move whose key difference is ``key``, or None."""
        for j in (_h1(key), _h2(key)):
            if self.keys[j] == key and self.moves[j] != MOVE_NONE:
                return self.moves[j]
        return None


def build_cuckoo(zobrist: Zobrist) -> CuckooTable:
    """Fill a cuckoo table with every reversible non-pawn move on an empty board."""
    table = CuckooTable()
    for pc in PIECES:
        pt = piece_type(pc)
        if pt == PieceType.PAWN:
            continue
        for s1 in range(64):
            reach = attacks_bb(pt, s1)
            for s2 in range(s1 + 1, 64):
                if not reach >> s2 & 1:
                    continue
                move = make_move(s1, s2)
                key = zobrist.psq[pc][s1] ^ zobrist.psq[pc][s2] ^ zobrist.side
                i = _h1(key)
                while True:
                    table.keys[i], key = key, table.keys[i]
                    table.moves[i], move = move, table.moves[i]
                    if move == MOVE_NONE:
                        break
                    i = _h2(key) if i == _h1(key) else _h1(key)
                table.count += 1
    return table


ZOBRIST = generate_zobrist()
CUCKOO = build_cuckoo(ZOBRIST)


@dataclass
class StateInfo:
    """Information needed to restore a position when a move is taken back."""

    # Carried over when a move is made.
    pawn_key: int = 0
    material_key: int = 0
    non_pawn_material: list[int] = field(default_factory=lambda: [0, 0])
    castling_rights: int = 0
    rule50: int = 0
    plies_from_null: int = 0
    ep_square: int = SQ_NONE

    # Recomputed after every move.
    key: int = 0
    checkers_bb: int = 0
    previous: StateInfo | None = None
    blockers_for_king: list[int] = field(default_factory=lambda: [0, 0])
    pinners: list[int] = field(default_factory=lambda: [0, 0])
    check_squares: list[int] = field(default_factory=lambda: [0] * 8)
    captured_piece: Piece = Piece.NO_PIECE
    repetition: int = 0

    def copy_for_move(self) -> StateInfo:
        """A new state linked to this one, keeping only the carried-over fields."""
        return StateInfo(
            pawn_key=self.pawn_key,
            material_key=self.material_key,
            non_pawn_material=list(self.non_pawn_material),
            castling_rights=self.castling_rights,
            rule50=self.rule50,
            plies_from_null=self.plies_from_null,
            ep_square=self.ep_square,
            previous=self,
        )

    def copy_for_null_move(self) -> StateInfo:
        """A new state linked to this one, keeping every field."""
        return StateInfo(
            pawn_key=self.pawn_key,
            material_key=self.material_key,
            non_pawn_material=list(self.non_pawn_material),
            castling_rights=self.castling_rights,
            rule50=self.rule50,
            plies_from_null=self.plies_from_null,
            ep_square=self.ep_square,
            key=self.key,
            checkers_bb=self.checkers_bb,
            previous=self,
            blockers_for_king=list(self.blockers_for_king),
            pinners=list(self.pinners),
            check_squares=list(self.check_squares),
            captured_piece=self.captured_piece,
            repetition=self.repetition,
        )