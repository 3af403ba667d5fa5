"""Chess position setup, FEN input and output, hash keys and move properties."""

from __future__ import annotations

from .board import (
    Board,
    aligned,
    attacks_bb,
    between_bb,
    iter_squares,
    pawn_attacks_bb,
    square_bb,
)
from .state import ZOBRIST, StateInfo
from .types import (
    EAST,
    MG,
    PIECE_VALUE,
    PIECES,
    RANK_1,
    RANK_6,
    SQ_A1,
    SQ_C1,
    SQ_D1,
    SQ_F1,
    SQ_G1,
    SQ_H1,
    SQ_NONE,
    WEST,
    CastlingRights,
    Color,
    MoveType,
    Piece,
    PieceType,
    castling_for,
    color_of,
    eg_value,
    file_of,
    from_sq,
    make_key,
    make_piece,
    make_square,
    move_type,
    opponent,
    pawn_push,
    piece_type,
    promotion_type,
    rank_of,
    relative_rank,
    relative_rank_of,
    relative_square,
    square_name,
    to_sq,
)

START_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
PIECE_TO_CHAR = " PNBRQK  pnbrqk"

_SINGLE_RIGHTS = (
    CastlingRights.WHITE_OO,
    CastlingRights.WHITE_OOO,
    CastlingRights.BLACK_OO,
    CastlingRights.BLACK_OOO,
)
_SEPARATOR = " +---+---+---+---+---+---+---+---+\n"


def _int_field(fields: list[str], index: int) -> int:
    if len(fields) <= index:
        return 0
    try:
        return int(fields[index])
    except ValueError:
        raise ValueError(f"invalid FEN counter: {fields[index]!r}") from None


def _check_single_right(rights: int) -> None:
    if rights not in _SINGLE_RIGHTS:
        raise ValueError(f"expected a single castling right, got {rights!r}")


class PositionBase(Board):
    """A position set up from FEN, with its state, keys and move queries."""

    def __init__(self, fen: str = START_FEN, chess960: bool = False) -> None:
        super().__init__()
        self.set(fen, chess960)

    # ------------------------------------------------------------------ setup

    def set(self, fen: str, chess960: bool = False) -> PositionBase:
        """Set the position from a FEN (or Shredder-FEN / X-FEN) string."""
        Board.__init__(self)
        self.castling_rights_mask = [0] * 64
        self.castling_rook_squares = [SQ_NONE] * 16
        self.castling_paths = [0] * 16
        self.state = StateInfo()

        fields = fen.split()
        if not fields:
            raise ValueError("empty FEN string")

        self._place_pieces(fields[0])
        for c in Color:
            if self.count(c, PieceType.KING) != 1:
                raise ValueError(f"FEN must hold exactly one king per side: {fen!r}")

        self.side_to_move = Color.WHITE if len(fields) > 1 and fields[1] == "w" else Color.BLACK

        for token in fields[2] if len(fields) > 2 else "":
            self._parse_castling_token(token)

        self.state.ep_square = self._parse_ep(fields[3] if len(fields) > 3 else "-")
        self.state.rule50 = _int_field(fields, 4)
        fullmove = _int_field(fields, 5)
        self.game_ply = max(2 * (fullmove - 1), 0) + int(self.side_to_move == Color.BLACK)

        self.chess960 = chess960
        self._set_state(self.state)

        if not self.pos_is_ok():
            raise ValueError(f"inconsistent position: {fen!r}")
        return self

    def _place_pieces(self, placement: str) -> None:
        sq = make_square(0, 7)
        for token in placement:
            if token.isdigit():
                sq += int(token)
            elif token == "/":
                sq -= 16
            else:
                idx = PIECE_TO_CHAR.find(token)
                if idx > 0 and token != " ":
                    self.put_piece(Piece(idx), sq)
                    sq += 1

    def _parse_castling_token(self, token: str) -> None:
        c = Color.BLACK if token.islower() else Color.WHITE
        rook = make_piece(c, PieceType.ROOK)
        upper = token.upper()
        first = relative_square(c, SQ_A1)
        last = relative_square(c, SQ_H1)

        if upper == "K":
            candidates = range(last, first - 1, -1)
        elif upper == "Q":
            candidates = range(first, last + 1)
        elif "A" <= upper <= "H":
            self._set_castling_right(c, make_square(ord(upper) - ord("A"), relative_rank(c, RANK_1)))
            return
        else:
            return

        rsq = next((s for s in candidates if self.squares[s] == rook), None)
        if rsq is None:
            raise ValueError(f"no rook for castling right {token!r}")
        self._set_castling_right(c, rsq)

    def _parse_ep(self, field: str) -> int:
        white = self.side_to_move == Color.WHITE
        if len(field) < 2 or not "a" <= field[0] <= "h" or field[1] != ("6" if white else "3"):
            return SQ_NONE
        ep = make_square(ord(field[0]) - ord("a"), ord(field[1]) - ord("1"))
        us = self.side_to_move
        them = opponent(us)
        valid = (
            pawn_attacks_bb(them, ep) & self.pieces_of(us, PieceType.PAWN)
            and self.pieces_of(them, PieceType.PAWN) & square_bb(ep + pawn_push(them))
            and not self.pieces() & (square_bb(ep) | square_bb(ep + pawn_push(us)))
        )
        return ep if valid else SQ_NONE

    def _set_castling_right(self, color: int, rfrom: int) -> None:
        kfrom = self.king_square(color)
        side = CastlingRights.KING_SIDE if kfrom < rfrom else CastlingRights.QUEEN_SIDE
        cr = castling_for(color, side)

        self.state.castling_rights |= int(cr)
        self.castling_rights_mask[kfrom] |= int(cr)
        self.castling_rights_mask[rfrom] |= int(cr)
        self.castling_rook_squares[cr] = rfrom

        king_side = bool(cr & CastlingRights.KING_SIDE)
        kto = relative_square(color, SQ_G1 if king_side else SQ_C1)
        rto = relative_square(color, SQ_F1 if king_side else SQ_D1)
        self.castling_paths[cr] = (between_bb(rfrom, rto) | between_bb(kfrom, kto)) & ~(
            square_bb(kfrom) | square_bb(rfrom)
        )

    def _set_check_info(self, si: StateInfo) -> None:
        si.blockers_for_king[Color.WHITE], si.pinners[Color.BLACK] = self.slider_blockers(
            self.pieces_of(Color.BLACK), self.king_square(Color.WHITE)
        )
        si.blockers_for_king[Color.BLACK], si.pinners[Color.WHITE] = self.slider_blockers(
            self.pieces_of(Color.WHITE), self.king_square(Color.BLACK)
        )
        ksq = self.king_square(opponent(self.side_to_move))
        occupied = self.pieces()
        si.check_squares[PieceType.PAWN] = pawn_attacks_bb(opponent(self.side_to_move), ksq)
        si.check_squares[PieceType.KNIGHT] = attacks_bb(PieceType.KNIGHT, ksq)
        si.check_squares[PieceType.BISHOP] = attacks_bb(PieceType.BISHOP, ksq, occupied)
        si.check_squares[PieceType.ROOK] = attacks_bb(PieceType.ROOK, ksq, occupied)
        si.check_squares[PieceType.QUEEN] = (
            si.check_squares[PieceType.BISHOP] | si.check_squares[PieceType.ROOK]
        )
        si.check_squares[PieceType.KING] = 0

    def _set_state(self, si: StateInfo) -> None:
        si.key = 0
        si.material_key = 0
        si.pawn_key = ZOBRIST.no_pawns
        si.non_pawn_material = [0, 0]
        si.checkers_bb = self.attackers_to(self.king_square(self.side_to_move)) & self.pieces_of(
            opponent(self.side_to_move)
        )

        self._set_check_info(si)

        for s in iter_squares(self.pieces()):
            pc = self.squares[s]
            si.key ^= ZOBRIST.psq[pc][s]
            pt = piece_type(pc)
            if pt == PieceType.PAWN:
                si.pawn_key ^= ZOBRIST.psq[pc][s]
            elif pt != PieceType.KING:
                si.non_pawn_material[color_of(pc)] += PIECE_VALUE[MG][pc]

        if si.ep_square != SQ_NONE:
            si.key ^= ZOBRIST.enpassant[file_of(si.ep_square)]
        if self.side_to_move == Color.BLACK:
            si.key ^= ZOBRIST.side
        si.key ^= ZOBRIST.castling[si.castling_rights]

        for pc in PIECES:
            for cnt in range(self.piece_count[pc]):
                si.material_key ^= ZOBRIST.psq[pc][cnt]

    def set_endgame(self, code: str, color: int) -> PositionBase:
        """Set up a position from an endgame code such as 'KBPKN'.

        ``color`` is the colour of the strong side (the first one in the code).
        """
        if not code or code[0] != "K":
            raise ValueError(f"endgame code must start with 'K': {code!r}")
        second_king = code.find("K", 1)
        if second_king == -1:
            raise ValueError(f"endgame code needs two kings: {code!r}")
        v = code.find("v")
        end = second_king if v == -1 else min(v, second_king)
        sides = [code[second_king:], code[:end]]
        if not all(0 < len(side) < 8 for side in sides):
            raise ValueError(f"invalid endgame code: {code!r}")
        sides[color] = sides[color].lower()
        fen = (
            f"8/{sides[0]}{8 - len(sides[0])}/8/8/8/8/"
            f"{sides[1]}{8 - len(sides[1])}/8 w - - 0 10"
        )
        return self.set(fen, False)

    # ------------------------------------------------------------- FEN output

    def fen(self) -> str:
        """Return the FEN of the position; Shredder-FEN castling in Chess960."""
        rows = []
        for r in range(7, -1, -1):
            row = ""
            empty = 0
            for f in range(8):
                pc = self.squares[make_square(f, r)]
                if pc == Piece.NO_PIECE:
                    empty += 1
                    continue
                if empty:
                    row += str(empty)
                    empty = 0
                row += PIECE_TO_CHAR[pc]
            if empty:
                row += str(empty)
            rows.append(row)

        castling = ""
        for cr, letter, base in (
            (CastlingRights.WHITE_OO, "K", "A"),
            (CastlingRights.WHITE_OOO, "Q", "A"),
            (CastlingRights.BLACK_OO, "k", "a"),
            (CastlingRights.BLACK_OOO, "q", "a"),
        ):
            if self.can_castle(cr):
                if self.chess960:
                    castling += chr(ord(base) + file_of(self.castling_rook_square(cr)))
                else:
                    castling += letter
        if not self.can_castle(CastlingRights.ANY_CASTLING):
            castling = "-"

        side = "w" if self.side_to_move == Color.WHITE else "b"
        ep = "-" if self.ep_square() == SQ_NONE else square_name(self.ep_square())
        fullmove = 1 + (self.game_ply - int(self.side_to_move == Color.BLACK)) // 2
        return f"{'/'.join(rows)} {side} {castling} {ep} {self.state.rule50} {fullmove}"

    def __str__(self) -> str:
        parts = ["\n", _SEPARATOR]
        for r in range(7, -1, -1):
            row = "".join(f" | {PIECE_TO_CHAR[self.squares[make_square(f, r)]]}" for f in range(8))
            parts.append(f"{row} | {r + 1}\n{_SEPARATOR}")
        parts.append("   a   b   c   d   e   f   g   h\n")
        parts.append(f"\nFen: {self.fen()}\nKey: {self.key():016X}\nCheckers: ")
        parts.extend(f"{square_name(s)} " for s in iter_squares(self.checkers()))
        return "".join(parts)

    # --------------------------------------------------------------- castling

    def can_castle(self, rights: int) -> bool:
        return bool(self.state.castling_rights & rights)

    def castling_rights(self, color: int) -> CastlingRights:
        return castling_for(color, self.state.castling_rights)

    def castling_impeded(self, rights: int) -> bool:
        _check_single_right(rights)
        return bool(self.pieces() & self.castling_paths[rights])

    def castling_rook_square(self, rights: int) -> int:
        _check_single_right(rights)
        return self.castling_rook_squares[rights]

    # --------------------------------------------------------------- checking

    def checkers(self) -> int:
        return self.state.checkers_bb

    def blockers_for_king(self, color: int) -> int:
        return self.state.blockers_for_king[color]

    def pinners(self, color: int) -> int:
        return self.state.pinners[color]

    def check_squares(self, piece_type: int) -> int:
        return self.state.check_squares[piece_type]

    def ep_square(self) -> int:
        return self.state.ep_square

    # ---------------------------------------------------------- move queries

    def _own_moved_piece(self, move: int) -> Piece:
        pc = self.piece_on(from_sq(move))
        if pc == Piece.NO_PIECE or color_of(pc) != self.side_to_move:
            raise ValueError("move does not start on a piece of the side to move")
        return pc

    def legal(self, move: int) -> bool:
        """Test whether a pseudo-legal move is legal."""
        self._own_moved_piece(move)
        us = self.side_to_move
        them = opponent(us)
        frm = from_sq(move)
        to = to_sq(move)
        kind = move_type(move)
        ksq = self.king_square(us)

        if kind == MoveType.EN_PASSANT:
            capsq = to - pawn_push(us)
            occupied = (self.pieces() ^ square_bb(frm) ^ square_bb(capsq)) | square_bb(to)
            return not (
                attacks_bb(PieceType.ROOK, ksq, occupied)
                & self.pieces_of(them, PieceType.QUEEN, PieceType.ROOK)
            ) and not (
                attacks_bb(PieceType.BISHOP, ksq, occupied)
                & self.pieces_of(them, PieceType.QUEEN, PieceType.BISHOP)
            )

        if kind == MoveType.CASTLING:
            to = relative_square(us, SQ_G1 if to > frm else SQ_C1)
            step = WEST if to > frm else EAST
            s = to
            while s != frm:
                if self.attackers_to(s) & self.pieces_of(them):
                    return False
                s += step
            return not self.chess960 or not (
                self.blockers_for_king(us) & square_bb(to_sq(move))
            )

        if piece_type(self.piece_on(frm)) == PieceType.KING:
            return not (
                self.attackers_to(to, self.pieces() ^ square_bb(frm)) & self.pieces_of(them)
            )

        return not (self.blockers_for_king(us) & square_bb(frm)) or aligned(frm, to, ksq)

    def capture(self, move: int) -> bool:
        kind = move_type(move)
        return (not self.empty(to_sq(move)) and kind != MoveType.CASTLING) or (
            kind == MoveType.EN_PASSANT
        )

    def moved_piece(self, move: int) -> Piece:
        return self.piece_on(from_sq(move))

    def captured_piece(self) -> Piece:
        return self.state.captured_piece

    def gives_check(self, move: int) -> bool:
        """Test whether a pseudo-legal move gives check."""
        self._own_moved_piece(move)
        us = self.side_to_move
        frm = from_sq(move)
        to = to_sq(move)
        ksq = self.king_square(opponent(us))
        king_bb = square_bb(ksq)

        if self.check_squares(piece_type(self.piece_on(frm))) & square_bb(to):
            return True

        if self.blockers_for_king(opponent(us)) & square_bb(frm) and not aligned(frm, to, ksq):
            return True

        kind = move_type(move)
        if kind == MoveType.NORMAL:
            return False
        if kind == MoveType.PROMOTION:
            occupied = self.pieces() ^ square_bb(frm)
            return bool(attacks_bb(promotion_type(move), to, occupied) & king_bb)
        if kind == MoveType.EN_PASSANT:
            capsq = make_square(file_of(to), rank_of(frm))
            b = (self.pieces() ^ square_bb(frm) ^ square_bb(capsq)) | square_bb(to)
            return bool(
                (attacks_bb(PieceType.ROOK, ksq, b)
                 & self.pieces_of(us, PieceType.QUEEN, PieceType.ROOK))
                | (attacks_bb(PieceType.BISHOP, ksq, b)
                   & self.pieces_of(us, PieceType.QUEEN, PieceType.BISHOP))
            )
        rto = relative_square(us, SQ_F1 if to > frm else SQ_D1)
        occupied = self.pieces() ^ square_bb(frm) ^ square_bb(to)
        return bool(
            attacks_bb(PieceType.ROOK, rto) & king_bb
            and attacks_bb(PieceType.ROOK, rto, occupied) & king_bb
        )

    # ------------------------------------------------------------- hash keys

    def _adjust_key50(self, key: int, after_move: bool) -> int:
        threshold = 14 - int(after_move)
        rule50 = self.state.rule50
        return key if rule50 < threshold else key ^ make_key((rule50 - threshold) // 8)

    def key(self) -> int:
        return self._adjust_key50(self.state.key, False)

    def material_key(self) -> int:
        return self.state.material_key

    def pawn_key(self) -> int:
        return self.state.pawn_key

    # ------------------------------------------------------------ properties

    def non_pawn_material(self, color: int | None = None) -> int:
        """Non-pawn material of one colour, or of both when ``color`` is None."""
        if color is None:
            return sum(self.state.non_pawn_material)
        return self.state.non_pawn_material[color]

    def rule50_count(self) -> int:
        return self.state.rule50

    def psq_eg_stm(self) -> int:
        sign = 1 if self.side_to_move == Color.WHITE else -1
        return sign * eg_value(self.psq)

    def pos_is_ok(self) -> bool:
        """Quick consistency check of kings, side to move and en passant square."""
        if self.side_to_move not in (Color.WHITE, Color.BLACK):
            return False
        for c in Color:
            if self.count(c, PieceType.KING) != 1:
                return False
            if self.piece_on(self.king_square(c)) != make_piece(c, PieceType.KING):
                return False
        ep = self.ep_square()
        return ep == SQ_NONE or relative_rank_of(self.side_to_move, ep) == RANK_6