"""Core chess types: colours, pieces, squares, moves, values and scores."""

from __future__ import annotations

from enum import IntEnum, IntFlag

MAX_MOVES = 256
MAX_PLY = 246

MOVE_NONE = 0
MOVE_NULL = 65

MG = 0
EG = 1

FILE_NB = 8
RANK_NB = 8
SQUARE_NB = 64
SQ_NONE = 64
PIECE_NB = 16

FILE_A, FILE_B, FILE_C, FILE_D, FILE_E, FILE_F, FILE_G, FILE_H = range(8)
RANK_1, RANK_2, RANK_3, RANK_4, RANK_5, RANK_6, RANK_7, RANK_8 = range(8)

SQ_A1, SQ_B1, SQ_C1, SQ_D1, SQ_E1, SQ_F1, SQ_G1, SQ_H1 = range(8)
SQ_A8, SQ_H8 = 56, 63

NORTH = 8
EAST = 1
SOUTH = -NORTH
WEST = -EAST
NORTH_EAST = NORTH + EAST
SOUTH_EAST = SOUTH + EAST
SOUTH_WEST = SOUTH + WEST
NORTH_WEST = NORTH + WEST

VALUE_ZERO = 0
VALUE_DRAW = 0
VALUE_KNOWN_WIN = 10000
VALUE_MATE = 32000
VALUE_INFINITE = 32001
VALUE_NONE = 32002
VALUE_TB_WIN_IN_MAX_PLY = VALUE_MATE - 2 * MAX_PLY
VALUE_TB_LOSS_IN_MAX_PLY = -VALUE_TB_WIN_IN_MAX_PLY
VALUE_MATE_IN_MAX_PLY = VALUE_MATE - MAX_PLY
VALUE_MATED_IN_MAX_PLY = -VALUE_MATE_IN_MAX_PLY

PAWN_VALUE_MG, PAWN_VALUE_EG = 126, 208
KNIGHT_VALUE_MG, KNIGHT_VALUE_EG = 781, 854
BISHOP_VALUE_MG, BISHOP_VALUE_EG = 825, 915
ROOK_VALUE_MG, ROOK_VALUE_EG = 1276, 1380
QUEEN_VALUE_MG, QUEEN_VALUE_EG = 2538, 2682
MIDGAME_LIMIT, ENDGAME_LIMIT = 15258, 3915

DEPTH_QS_CHECKS = 0
DEPTH_QS_NO_CHECKS = -1
DEPTH_QS_RECAPTURES = -5
DEPTH_NONE = -6
DEPTH_OFFSET = -7

SCORE_ZERO = 0

_MASK64 = (1 << 64) - 1


class Color(IntEnum):
    WHITE = 0
    BLACK = 1


class PieceType(IntEnum):
    NO_PIECE_TYPE = 0
    ALL_PIECES = 0
    PAWN = 1
    KNIGHT = 2
    BISHOP = 3
    ROOK = 4
    QUEEN = 5
    KING = 6


class Piece(IntEnum):
    NO_PIECE = 0
    W_PAWN = 1
    W_KNIGHT = 2
    W_BISHOP = 3
    W_ROOK = 4
    W_QUEEN = 5
    W_KING = 6
    B_PAWN = 9
    B_KNIGHT = 10
    B_BISHOP = 11
    B_ROOK = 12
    B_QUEEN = 13
    B_KING = 14


class MoveType(IntEnum):
    NORMAL = 0
    PROMOTION = 1 << 14
    EN_PASSANT = 2 << 14
    CASTLING = 3 << 14


class CastlingRights(IntFlag):
    NO_CASTLING = 0
    WHITE_OO = 1
    WHITE_OOO = 2
    BLACK_OO = 4
    BLACK_OOO = 8
    KING_SIDE = 5
    QUEEN_SIDE = 10
    WHITE_CASTLING = 3
    BLACK_CASTLING = 12
    ANY_CASTLING = 15


class Bound(IntFlag):
    NONE = 0
    UPPER = 1
    LOWER = 2
    EXACT = 3


PIECES = (
    Piece.W_PAWN, Piece.W_KNIGHT, Piece.W_BISHOP, Piece.W_ROOK, Piece.W_QUEEN, Piece.W_KING,
    Piece.B_PAWN, Piece.B_KNIGHT, Piece.B_BISHOP, Piece.B_ROOK, Piece.B_QUEEN, Piece.B_KING,
)

_MG_VALUES = (0, PAWN_VALUE_MG, KNIGHT_VALUE_MG, BISHOP_VALUE_MG, ROOK_VALUE_MG, QUEEN_VALUE_MG, 0, 0)
_EG_VALUES = (0, PAWN_VALUE_EG, KNIGHT_VALUE_EG, BISHOP_VALUE_EG, ROOK_VALUE_EG, QUEEN_VALUE_EG, 0, 0)

# Indexed as PIECE_VALUE[phase][piece].
PIECE_VALUE = (_MG_VALUES * 2, _EG_VALUES * 2)


def opponent(color: int) -> Color:
    """Return the other colour."""
    return Color(color ^ Color.BLACK)


def flip_piece(piece: int) -> Piece:
    """Swap the colour of a piece, e.g. white knight to black knight."""
    return Piece(piece ^ 8)


def make_square(file: int, rank: int) -> int:
    return (rank << 3) + file


def make_piece(color: int, piece_type: int) -> Piece:
    return Piece((color << 3) + piece_type)


def piece_type(piece: int) -> PieceType:
    return PieceType(piece & 7)


def color_of(piece: int) -> Color:
    if piece == Piece.NO_PIECE:
        raise ValueError("an empty square has no colour")
    return Color(piece >> 3)


def file_of(square: int) -> int:
    return square & 7


def rank_of(square: int) -> int:
    return square >> 3


def flip_rank(square: int) -> int:
    """Mirror vertically: A1 <-> A8."""
    return square ^ SQ_A8


def flip_file(square: int) -> int:
    """Mirror horizontally: A1 <-> H1."""
    return square ^ SQ_H1


def relative_square(color: int, square: int) -> int:
    return square ^ (color * 56)


def relative_rank(color: int, rank: int) -> int:
    return rank ^ (color * 7)


def relative_rank_of(color: int, square: int) -> int:
    return relative_rank(color, rank_of(square))


def pawn_push(color: int) -> int:
    return NORTH if color == Color.WHITE else SOUTH


def castling_for(color: int, rights: int) -> CastlingRights:
    """Restrict castling rights to those belonging to ``color``."""
    side = CastlingRights.WHITE_CASTLING if color == Color.WHITE else CastlingRights.BLACK_CASTLING
    return CastlingRights(side & rights)


def from_sq(move: int) -> int:
    return (move >> 6) & 0x3F


def to_sq(move: int) -> int:
    return move & 0x3F


def from_to(move: int) -> int:
    return move & 0xFFF


def move_type(move: int) -> MoveType:
    return MoveType(move & (3 << 14))


def promotion_type(move: int) -> PieceType:
    return PieceType(((move >> 12) & 3) + PieceType.KNIGHT)


def make_move(from_square: int, to_square: int) -> int:
    return (from_square << 6) + to_square


def make(kind: int, from_square: int, to_square: int, promotion: int = PieceType.KNIGHT) -> int:
    """Encode a move of the given type, with an optional promotion piece type."""
    return kind + ((promotion - PieceType.KNIGHT) << 12) + (from_square << 6) + to_square


def is_ok_move(move: int) -> bool:
    """False for the null and none moves, whose origin equals their destination."""
    return from_sq(move) != to_sq(move)


def is_ok_square(square: int) -> bool:
    return 0 <= square <= SQ_H8


def mate_in(ply: int) -> int:
    return VALUE_MATE - ply


def mated_in(ply: int) -> int:
    return -VALUE_MATE + ply


def make_key(seed: int) -> int:
    """Derive a 64-bit key from a seed with a linear congruential step."""
    return (seed * 6364136223846793005 + 1442695040888963407) & _MASK64


def _int16(value: int) -> int:
    return ((value + 0x8000) & 0xFFFF) - 0x8000


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def make_score(mg: int, eg: int) -> int:
    """Pack a middlegame and an endgame value into one integer."""
    return (eg << 16) + mg


def mg_value(score: int) -> int:
    return _int16(score)


def eg_value(score: int) -> int:
    return _int16((score + 0x8000) >> 16)


def score_div(score: int, divisor: int) -> int:
    """Divide both halves of a score, truncating towards zero."""
    return make_score(_trunc_div(mg_value(score), divisor), _trunc_div(eg_value(score), divisor))


def score_mul(score: int, factor: int | bool) -> int:
    """Multiply a score by an integer, or keep/zero it by a boolean."""
    if isinstance(factor, bool):
        return score if factor else SCORE_ZERO
    result = score * factor
    if (
        eg_value(result) != factor * eg_value(score)
        or mg_value(result) != factor * mg_value(score)
    ):
        raise OverflowError("score multiplication overflows a component")
    return result


def square_name(square: int) -> str:
    """Return the algebraic name of a square, such as 'e4'."""
    if not is_ok_square(square):
        raise ValueError(f"invalid square: {square}")
    return "abcdefgh"[file_of(square)] + "12345678"[rank_of(square)]


def parse_square(name: str) -> int:
    """Parse an algebraic square name such as 'e4'."""
    if len(name) != 2 or name[0] not in "abcdefgh" or name[1] not in "12345678":
        raise ValueError(f"invalid square name: {name!r}")
    return make_square(ord(name[0]) - ord("a"), ord(name[1]) - ord("1"))