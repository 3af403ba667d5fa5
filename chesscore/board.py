"""Bitboard helpers and the piece placement part of a chess position."""

from __future__ import annotations

from collections.abc import Iterator

from .psqt import psq_score
from .types import (
    SCORE_ZERO,
    Color,
    Piece,
    PieceType,
    color_of,
    file_of,
    is_ok_square,
    make_square,
    piece_type,
    rank_of,
)

MASK64 = (1 << 64) - 1

FILE_A_BB = 0x0101010101010101
FILE_H_BB = FILE_A_BB << 7
RANK_1_BB = 0xFF
RANK_8_BB = RANK_1_BB << 56
DARK_SQUARES = 0xAA55AA55AA55AA55

_KNIGHT_DELTAS = ((1, 2), (2, 1), (2, -1), (1, -2), (-1, -2), (-2, -1), (-2, 1), (-1, 2))
_KING_DELTAS = ((1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1), (0, -1), (1, -1))
_ROOK_DIRECTIONS = ((1, 0), (-1, 0), (0, 1), (0, -1))
_BISHOP_DIRECTIONS = ((1, 1), (1, -1), (-1, 1), (-1, -1))


def square_bb(square: int) -> int:
    """Return the bitboard holding only ``square``."""
    if not is_ok_square(square):
        raise ValueError(f"invalid square: {square}")
    return 1 << square


def popcount(bb: int) -> int:
    return bb.bit_count()


def lsb(bb: int) -> int:
    """Return the least significant occupied square of a non-empty bitboard."""
    if not bb:
        raise ValueError("empty bitboard has no least significant square")
    return (bb & -bb).bit_length() - 1


def iter_squares(bb: int) -> Iterator[int]:
    """Yield the squares of a bitboard from lowest to highest."""
    while bb:
        low = bb & -bb
        yield low.bit_length() - 1
        bb ^= low


def more_than_one(bb: int) -> bool:
    return bool(bb & (bb - 1))


def file_bb(square: int) -> int:
    return FILE_A_BB << file_of(square)


def _rank_bb(square: int) -> int:
    return RANK_1_BB << (8 * rank_of(square))


def pawn_attacks_of(color: int, pawns: int) -> int:
    """Return the squares attacked by all pawns of ``color`` on ``pawns``."""
    if color == Color.WHITE:
        return (((pawns & ~FILE_H_BB) << 9) | ((pawns & ~FILE_A_BB) << 7)) & MASK64
    return ((pawns & ~FILE_H_BB) >> 7) | ((pawns & ~FILE_A_BB) >> 9)


def pawn_attacks_bb(color: int, square: int) -> int:
    return pawn_attacks_of(color, square_bb(square))


def _leaper(square: int, deltas: tuple[tuple[int, int], ...]) -> int:
    f, r = file_of(square), rank_of(square)
    bb = 0
    for df, dr in deltas:
        nf, nr = f + df, r + dr
        if 0 <= nf < 8 and 0 <= nr < 8:
            bb |= 1 << make_square(nf, nr)
    return bb


def _slide(square: int, directions: tuple[tuple[int, int], ...], occupied: int) -> int:
    f, r = file_of(square), rank_of(square)
    bb = 0
    for df, dr in directions:
        nf, nr = f + df, r + dr
        while 0 <= nf < 8 and 0 <= nr < 8:
            s = make_square(nf, nr)
            bb |= 1 << s
            if occupied >> s & 1:
                break
            nf, nr = nf + df, nr + dr
    return bb


_KNIGHT_ATTACKS = tuple(_leaper(s, _KNIGHT_DELTAS) for s in range(64))
_KING_ATTACKS = tuple(_leaper(s, _KING_DELTAS) for s in range(64))


def attacks_bb(piece_type: int, square: int, occupied: int = 0) -> int:
    """Return the squares a non-pawn piece on ``square`` attacks given ``occupied``."""
    if piece_type == PieceType.KNIGHT:
        return _KNIGHT_ATTACKS[square]
    if piece_type == PieceType.KING:
        return _KING_ATTACKS[square]
    if piece_type == PieceType.BISHOP:
        return _slide(square, _BISHOP_DIRECTIONS, occupied)
    if piece_type == PieceType.ROOK:
        return _slide(square, _ROOK_DIRECTIONS, occupied)
    if piece_type == PieceType.QUEEN:
        return _slide(square, _BISHOP_DIRECTIONS + _ROOK_DIRECTIONS, occupied)
    raise ValueError(f"no colour-independent attacks for piece type {piece_type}")


def _build_lines() -> tuple[list[list[int]], list[list[int]]]:
    lines = [[0] * 64 for _ in range(64)]
    between = [[0] * 64 for _ in range(64)]
    for pt in (PieceType.BISHOP, PieceType.ROOK):
        empty = [attacks_bb(pt, s) for s in range(64)]
        for s1 in range(64):
            for s2 in iter_squares(empty[s1]):
                lines[s1][s2] = (empty[s1] & empty[s2]) | (1 << s1) | (1 << s2)
                between[s1][s2] = attacks_bb(pt, s1, 1 << s2) & attacks_bb(pt, s2, 1 << s1)
    for s1 in range(64):
        for s2 in range(64):
            between[s1][s2] |= 1 << s2
    return lines, between


_LINE_BB, _BETWEEN_BB = _build_lines()


def between_bb(s1: int, s2: int) -> int:
    """Squares strictly between two aligned squares, plus ``s2`` itself.

    For squares not on a common line only ``s2`` is returned.
    """
    return _BETWEEN_BB[s1][s2]


def line_bb(s1: int, s2: int) -> int:
    """The whole board line through two aligned squares, or 0 if they are not aligned."""
    return _LINE_BB[s1][s2]


def aligned(s1: int, s2: int, s3: int) -> bool:
    return bool(line_bb(s1, s2) & (1 << s3))


def _forward_ranks_bb(color: int, square: int) -> int:
    r = rank_of(square)
    if color == Color.WHITE:
        return MASK64 & ~((1 << (8 * (r + 1))) - 1)
    return (1 << (8 * r)) - 1


def _adjacent_files_bb(square: int) -> int:
    f = file_bb(square)
    return ((f & ~FILE_H_BB) << 1) | ((f & ~FILE_A_BB) >> 1)


def passed_pawn_span(color: int, square: int) -> int:
    """Squares ahead of a pawn on its own and the adjacent files."""
    return _forward_ranks_bb(color, square) & (file_bb(square) | _adjacent_files_bb(square))


def opposite_colors(s1: int, s2: int) -> bool:
    return bool((s1 + rank_of(s1) + s2 + rank_of(s2)) & 1)


class Board:
    """Piece placement with bitboards by type and colour, counts and PSQ score."""

    def __init__(self) -> None:
        self.squares: list[Piece] = [Piece.NO_PIECE] * 64
        self.by_type: list[int] = [0] * 8
        self.by_color: list[int] = [0, 0]
        self.piece_count: list[int] = [0] * 16
        self.psq: int = SCORE_ZERO

    def put_piece(self, piece: int, square: int) -> None:
        bit = square_bb(square)
        color = color_of(piece)
        self.squares[square] = Piece(piece)
        self.by_type[PieceType.ALL_PIECES] |= bit
        self.by_type[piece_type(piece)] |= bit
        self.by_color[color] |= bit
        self.piece_count[piece] += 1
        self.piece_count[color << 3] += 1
        self.psq += psq_score(piece, square)

    def remove_piece(self, square: int) -> None:
        piece = self.squares[square]
        if piece == Piece.NO_PIECE:
            raise ValueError(f"no piece to remove on square {square}")
        bit = 1 << square
        color = color_of(piece)
        self.by_type[PieceType.ALL_PIECES] ^= bit
        self.by_type[piece_type(piece)] ^= bit
        self.by_color[color] ^= bit
        self.squares[square] = Piece.NO_PIECE
        self.piece_count[piece] -= 1
        self.piece_count[color << 3] -= 1
        self.psq -= psq_score(piece, square)

    def move_piece(self, from_square: int, to_square: int) -> None:
        piece = self.squares[from_square]
        if piece == Piece.NO_PIECE:
            raise ValueError(f"no piece to move on square {from_square}")
        from_to = (1 << from_square) | (1 << to_square)
        self.by_type[PieceType.ALL_PIECES] ^= from_to
        self.by_type[piece_type(piece)] ^= from_to
        self.by_color[color_of(piece)] ^= from_to
        self.squares[from_square] = Piece.NO_PIECE
        self.squares[to_square] = piece
        self.psq += psq_score(piece, to_square) - psq_score(piece, from_square)

    def piece_on(self, square: int) -> Piece:
        if not is_ok_square(square):
            raise ValueError(f"invalid square: {square}")
        return self.squares[square]

    def empty(self, square: int) -> bool:
        return self.piece_on(square) == Piece.NO_PIECE

    def pieces(self, *args: int) -> int:
        """All pieces, or the union of pieces of the given types."""
        if not args:
            return self.by_type[PieceType.ALL_PIECES]
        bb = 0
        for pt in args:
            bb |= self.by_type[pt]
        return bb

    def pieces_of(self, color: int, *args: int) -> int:
        """Pieces of one colour, optionally restricted to the given types."""
        return self.by_color[color] & self.pieces(*args)

    def count(self, color: int, piece_type: int) -> int:
        """Number of pieces of a type and colour; ALL_PIECES counts every piece."""
        return self.piece_count[(color << 3) + piece_type]

    def king_square(self, color: int) -> int:
        return lsb(self.pieces_of(color, PieceType.KING))

    def attackers_to(self, square: int, occupied: int | None = None) -> int:
        """Pieces of both colours attacking ``square`` given the occupancy."""
        if occupied is None:
            occupied = self.pieces()
        return (
            (pawn_attacks_bb(Color.BLACK, square) & self.pieces_of(Color.WHITE, PieceType.PAWN))
            | (pawn_attacks_bb(Color.WHITE, square) & self.pieces_of(Color.BLACK, PieceType.PAWN))
            | (attacks_bb(PieceType.KNIGHT, square) & self.pieces(PieceType.KNIGHT))
            | (attacks_bb(PieceType.ROOK, square, occupied)
               & self.pieces(PieceType.ROOK, PieceType.QUEEN))
            | (attacks_bb(PieceType.BISHOP, square, occupied)
               & self.pieces(PieceType.BISHOP, PieceType.QUEEN))
            | (attacks_bb(PieceType.KING, square) & self.pieces(PieceType.KING))
        )

    def slider_blockers(self, sliders: int, square: int) -> tuple[int, int]:
        """Return ``(blockers, pinners)`` for attacks by ``sliders`` on ``square``.

        A blocker is a single piece standing between a slider and the square;
        pinners are sliders whose blocker has the colour of the piece on ``square``.
        """
        blockers = 0
        pinners = 0
        snipers = (
            (attacks_bb(PieceType.ROOK, square) & self.pieces(PieceType.QUEEN, PieceType.ROOK))
            | (attacks_bb(PieceType.BISHOP, square)
               & self.pieces(PieceType.QUEEN, PieceType.BISHOP))
        ) & sliders
        occupancy = self.pieces() ^ snipers
        own = self.by_color[color_of(self.piece_on(square))]
        for sniper in iter_squares(snipers):
            b = between_bb(square, sniper) & occupancy
            if b and not more_than_one(b):
                blockers |= b
                if b & own:
                    pinners |= 1 << sniper
        return blockers, pinners

    def attacks_by(self, color: int, piece_type: int) -> int:
        """All squares attacked by the pieces of one type and colour."""
        if piece_type == PieceType.PAWN:
            return pawn_attacks_of(color, self.pieces_of(color, PieceType.PAWN))
        threats = 0
        occupied = self.pieces()
        for s in iter_squares(self.pieces_of(color, piece_type)):
            threats |= attacks_bb(piece_type, s, occupied)
        return threats

    def is_on_semiopen_file(self, color: int, square: int) -> bool:
        return not (self.pieces_of(color, PieceType.PAWN) & file_bb(square))

    def pawn_passed(self, color: int, square: int) -> bool:
        enemy_pawns = self.pieces_of(color ^ Color.BLACK, PieceType.PAWN)
        return not (enemy_pawns & passed_pawn_span(color, square))

    def pawns_on_same_color_squares(self, color: int, square: int) -> int:
        mask = DARK_SQUARES if DARK_SQUARES >> square & 1 else MASK64 & ~DARK_SQUARES
        return popcount(self.pieces_of(color, PieceType.PAWN) & mask)

    def opposite_bishops(self) -> bool:
        return (
            self.count(Color.WHITE, PieceType.BISHOP) == 1
            and self.count(Color.BLACK, PieceType.BISHOP) == 1
            and opposite_colors(
                lsb(self.pieces_of(Color.WHITE, PieceType.BISHOP)),
                lsb(self.pieces_of(Color.BLACK, PieceType.BISHOP)),
            )
        )