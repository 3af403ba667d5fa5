"""Piece-square tables combining material and positional bonuses."""

from __future__ import annotations

from .types import (
    EG,
    MG,
    PIECE_VALUE,
    Piece,
    PieceType,
    file_of,
    flip_piece,
    flip_rank,
    make_score,
    piece_type,
    rank_of,
)

S = make_score

# Positional bonuses for files A to D, mirrored for E to H; indexed [piece][rank][file].
_BONUS = {
    Piece.W_KNIGHT: (
        (S(-175, -96), S(-92, -65), S(-74, -49), S(-73, -21)),
        (S(-77, -67), S(-41, -54), S(-27, -18), S(-15, 8)),
        (S(-61, -40), S(-17, -27), S(6, -8), S(12, 29)),
        (S(-35, -35), S(8, -2), S(40, 13), S(49, 28)),
        (S(-34, -45), S(13, -16), S(44, 9), S(51, 39)),
        (S(-9, -51), S(22, -44), S(58, -16), S(53, 17)),
        (S(-67, -69), S(-27, -50), S(4, -51), S(37, 12)),
        (S(-201, -100), S(-83, -88), S(-56, -56), S(-26, -17)),
    ),
    Piece.W_BISHOP: (
        (S(-37, -40), S(-4, -21), S(-6, -26), S(-16, -8)),
        (S(-11, -26), S(6, -9), S(13, -12), S(3, 1)),
        (S(-5, -11), S(15, -1), S(-4, -1), S(12, 7)),
        (S(-4, -14), S(8, -4), S(18, 0), S(27, 12)),
        (S(-8, -12), S(20, -1), S(15, -10), S(22, 11)),
        (S(-11, -21), S(4, 4), S(1, 3), S(8, 4)),
        (S(-12, -22), S(-10, -14), S(4, -1), S(0, 1)),
        (S(-34, -32), S(1, -29), S(-10, -26), S(-16, -17)),
    ),
    Piece.W_ROOK: (
        (S(-31, -9), S(-20, -13), S(-14, -10), S(-5, -9)),
        (S(-21, -12), S(-13, -9), S(-8, -1), S(6, -2)),
        (S(-25, 6), S(-11, -8), S(-1, -2), S(3, -6)),
        (S(-13, -6), S(-5, 1), S(-4, -9), S(-6, 7)),
        (S(-27, -5), S(-15, 8), S(-4, 7), S(3, -6)),
        (S(-22, 6), S(-2, 1), S(6, -7), S(12, 10)),
        (S(-2, 4), S(12, 5), S(16, 20), S(18, -5)),
        (S(-17, 18), S(-19, 0), S(-1, 19), S(9, 13)),
    ),
    Piece.W_QUEEN: (
        (S(3, -69), S(-5, -57), S(-5, -47), S(4, -26)),
        (S(-3, -54), S(5, -31), S(8, -22), S(12, -4)),
        (S(-3, -39), S(6, -18), S(13, -9), S(7, 3)),
        (S(4, -23), S(5, -3), S(9, 13), S(8, 24)),
        (S(0, -29), S(14, -6), S(12, 9), S(5, 21)),
        (S(-4, -38), S(10, -18), S(6, -11), S(8, 1)),
        (S(-5, -50), S(6, -27), S(10, -24), S(8, -8)),
        (S(-2, -74), S(-2, -52), S(1, -43), S(-2, -34)),
    ),
    Piece.W_KING: (
        (S(271, 1), S(327, 45), S(271, 85), S(198, 76)),
        (S(278, 53), S(303, 100), S(234, 133), S(179, 135)),
        (S(195, 88), S(258, 130), S(169, 169), S(120, 175)),
        (S(164, 103), S(190, 156), S(138, 172), S(98, 172)),
        (S(154, 96), S(179, 166), S(105, 199), S(70, 199)),
        (S(123, 92), S(145, 172), S(81, 184), S(31, 191)),
        (S(88, 47), S(120, 121), S(65, 116), S(33, 131)),
        (S(59, 11), S(89, 59), S(45, 73), S(-1, 78)),
    ),
}

_NO_PAWN_RANK = (0,) * 8

# Pawn bonuses are asymmetric and given for every file; indexed [rank][file].
_PAWN_BONUS = (
    _NO_PAWN_RANK,
    (S(2, -8), S(4, -6), S(11, 9), S(18, 5), S(16, 16), S(21, 6), S(9, -6), S(-3, -18)),
    (S(-9, -9), S(-15, -7), S(11, -10), S(15, 5), S(31, 2), S(23, 3), S(6, -8), S(-20, -5)),
    (S(-3, 7), S(-20, 1), S(8, -8), S(19, -2), S(39, -14), S(17, -13), S(2, -11), S(-5, -6)),
    (S(11, 12), S(-4, 6), S(-11, 2), S(2, -6), S(11, -5), S(0, -4), S(-12, 14), S(5, 9)),
    (S(3, 27), S(-11, 18), S(-6, 19), S(22, 29), S(-8, 30), S(-5, 9), S(-14, 8), S(-11, 14)),
    (S(-7, -1), S(6, -14), S(-2, 13), S(-11, 22), S(4, 24), S(-14, 17), S(10, 7), S(-9, 7)),
    _NO_PAWN_RANK,
)

_WHITE_PIECES = (
    Piece.W_PAWN, Piece.W_KNIGHT, Piece.W_BISHOP, Piece.W_ROOK, Piece.W_QUEEN, Piece.W_KING,
)


def _edge_distance(file: int) -> int:
    return min(file, 7 - file)


def build_psq() -> tuple[tuple[int, ...], ...]:
    """Build the 16x64 table of packed scores, indexed [piece][square].

    White entries are material plus bonus; black entries mirror them by rank
    with the sign reversed.
    """
    table = [[0] * 64 for _ in range(16)]
    for pc in _WHITE_PIECES:
        material = make_score(PIECE_VALUE[MG][pc], PIECE_VALUE[EG][pc])
        for sq in range(64):
            if piece_type(pc) == PieceType.PAWN:
                bonus = _PAWN_BONUS[rank_of(sq)][file_of(sq)]
            else:
                bonus = _BONUS[pc][rank_of(sq)][_edge_distance(file_of(sq))]
            table[pc][sq] = material + bonus
            table[flip_piece(pc)][flip_rank(sq)] = -table[pc][sq]
    return tuple(tuple(row) for row in table)


PSQ = build_psq()


def psq_score(piece: int, square: int) -> int:
    """Return the packed piece-square score of a piece standing on a square."""
    return PSQ[piece][square]