"""A chess position that can make and take back moves."""

from __future__ import annotations

from .basepos import START_FEN, PositionBase
from .board import attacks_bb, between_bb, pawn_attacks_bb, square_bb
from .state import CUCKOO, ZOBRIST
from .types import (
    BISHOP_VALUE_MG,
    KNIGHT_VALUE_MG,
    MG,
    PAWN_VALUE_MG,
    PIECE_VALUE,
    QUEEN_VALUE_MG,
    ROOK_VALUE_MG,
    SQ_C1,
    SQ_D1,
    SQ_F1,
    SQ_G1,
    SQ_NONE,
    VALUE_ZERO,
    MoveType,
    Piece,
    PieceType,
    color_of,
    file_of,
    from_sq,
    is_ok_move,
    make_piece,
    move_type,
    opponent,
    pawn_push,
    piece_type,
    promotion_type,
    relative_square,
    to_sq,
)

# Attackers in order of increasing value, with the slider types whose x-rays
# may open behind them once they leave the exchange square.
_SEE_ORDER = (
    (PieceType.PAWN, PAWN_VALUE_MG, (PieceType.BISHOP,)),
    (PieceType.KNIGHT, KNIGHT_VALUE_MG, ()),
    (PieceType.BISHOP, BISHOP_VALUE_MG, (PieceType.BISHOP,)),
    (PieceType.ROOK, ROOK_VALUE_MG, (PieceType.ROOK,)),
    (PieceType.QUEEN, QUEEN_VALUE_MG, (PieceType.BISHOP, PieceType.ROOK)),
)


def _require_ok(move: int) -> None:
    if not is_ok_move(move):
        raise ValueError(f"not a real move: {move}")


class Position(PositionBase):
    """A position that keeps a chain of states so moves can be undone."""

    def __init__(self, fen: str = START_FEN, chess960: bool = False) -> None:
        self.nodes = 0
        super().__init__(fen, chess960)

    # ------------------------------------------------------------ make/unmake

    def _do_castling(self, us: int, frm: int, to: int, do: bool) -> tuple[int, int, int]:
        """Move king and rook for a castling move (or back); return (kto, rfrom, rto)."""
        king_side = to > frm
        rfrom = to  # castling is encoded as king captures own rook
        rto = relative_square(us, SQ_F1 if king_side else SQ_D1)
        kto = relative_square(us, SQ_G1 if king_side else SQ_C1)
        king = make_piece(us, PieceType.KING)
        rook = make_piece(us, PieceType.ROOK)
        # Remove both pieces first since squares may overlap in Chess960.
        if do:
            self.remove_piece(frm)
            self.remove_piece(rfrom)
            self.put_piece(king, kto)
            self.put_piece(rook, rto)
        else:
            self.remove_piece(kto)
            self.remove_piece(rto)
            self.put_piece(king, frm)
            self.put_piece(rook, rfrom)
        return kto, rfrom, rto

    def do_move(self, move: int, gives_check: bool | None = None) -> None:
        """Make a legal move; ``gives_check`` is computed when not given."""
        _require_ok(move)
        pc = self._own_moved_piece(move)
        if gives_check is None:
            gives_check = self.gives_check(move)

        self.nodes += 1
        old = self.state
        k = old.key ^ ZOBRIST.side
        st = old.copy_for_move()
        self.state = st

        self.game_ply += 1
        st.rule50 += 1
        st.plies_from_null += 1

        us = self.side_to_move
        them = opponent(us)
        frm = from_sq(move)
        to = to_sq(move)
        kind = move_type(move)
        if kind == MoveType.EN_PASSANT:
            captured = make_piece(them, PieceType.PAWN)
        else:
            captured = self.piece_on(to)

        if kind == MoveType.CASTLING:
            to, rfrom, rto = self._do_castling(us, frm, to, True)
            k ^= ZOBRIST.psq[captured][rfrom] ^ ZOBRIST.psq[captured][rto]
            captured = Piece.NO_PIECE

        if captured != Piece.NO_PIECE:
            capsq = to
            if piece_type(captured) == PieceType.PAWN:
                if kind == MoveType.EN_PASSANT:
                    capsq -= pawn_push(us)
                st.pawn_key ^= ZOBRIST.psq[captured][capsq]
            else:
                st.non_pawn_material[them] -= PIECE_VALUE[MG][captured]

            self.remove_piece(capsq)
            k ^= ZOBRIST.psq[captured][capsq]
            st.material_key ^= ZOBRIST.psq[captured][self.piece_count[captured]]
            st.rule50 = 0

        k ^= ZOBRIST.psq[pc][frm] ^ ZOBRIST.psq[pc][to]

        if st.ep_square != SQ_NONE:
            k ^= ZOBRIST.enpassant[file_of(st.ep_square)]
            st.ep_square = SQ_NONE

        touched = self.castling_rights_mask[frm] | self.castling_rights_mask[to]
        if st.castling_rights and touched:
            k ^= ZOBRIST.castling[st.castling_rights]
            st.castling_rights &= ~touched
            k ^= ZOBRIST.castling[st.castling_rights]

        if kind != MoveType.CASTLING:
            self.move_piece(frm, to)

        if piece_type(pc) == PieceType.PAWN:
            behind = to - pawn_push(us)
            if (to ^ frm) == 16 and pawn_attacks_bb(us, behind) & self.pieces_of(
                them, PieceType.PAWN
            ):
                st.ep_square = behind
                k ^= ZOBRIST.enpassant[file_of(behind)]
            elif kind == MoveType.PROMOTION:
                promotion = make_piece(us, promotion_type(move))
                self.remove_piece(to)
                self.put_piece(promotion, to)
                k ^= ZOBRIST.psq[pc][to] ^ ZOBRIST.psq[promotion][to]
                st.pawn_key ^= ZOBRIST.psq[pc][to]
                st.material_key ^= (
                    ZOBRIST.psq[promotion][self.piece_count[promotion] - 1]
                    ^ ZOBRIST.psq[pc][self.piece_count[pc]]
                )
                st.non_pawn_material[us] += PIECE_VALUE[MG][promotion]

            st.pawn_key ^= ZOBRIST.psq[pc][frm] ^ ZOBRIST.psq[pc][to]
            st.rule50 = 0

        st.captured_piece = captured
        st.key = k
        st.checkers_bb = (
            self.attackers_to(self.king_square(them)) & self.pieces_of(us) if gives_check else 0
        )

        self.side_to_move = them
        self._set_check_info(st)

        # Ply distance to the previous occurrence of this position, negative
        # when that occurrence was itself a repetition.
        st.repetition = 0
        end = min(st.rule50, st.plies_from_null)
        if end >= 4:
            stp = st.previous.previous
            for i in range(4, end + 1, 2):
                stp = stp.previous.previous
                if stp.key == st.key:
                    st.repetition = -i if stp.repetition else i
                    break

    def undo_move(self, move: int) -> None:
        """Take back ``move``, restoring the position exactly."""
        _require_ok(move)
        st = self.state
        if st.previous is None:
            raise ValueError("no move to undo")

        self.side_to_move = opponent(self.side_to_move)
        us = self.side_to_move
        frm = from_sq(move)
        to = to_sq(move)
        kind = move_type(move)

        if kind == MoveType.PROMOTION:
            self.remove_piece(to)
            self.put_piece(make_piece(us, PieceType.PAWN), to)

        if kind == MoveType.CASTLING:
            self._do_castling(us, frm, to, False)
        else:
            self.move_piece(to, frm)
            if st.captured_piece != Piece.NO_PIECE:
                capsq = to
                if kind == MoveType.EN_PASSANT:
                    capsq -= pawn_push(us)
                self.put_piece(st.captured_piece, capsq)

        self.state = st.previous
        self.game_ply -= 1

    def do_null_move(self) -> None:
        """Pass the move to the other side without changing the board."""
        if self.checkers():
            raise ValueError("cannot make a null move while in check")
        st = self.state.copy_for_null_move()
        self.state = st

        if st.ep_square != SQ_NONE:
            st.key ^= ZOBRIST.enpassant[file_of(st.ep_square)]
            st.ep_square = SQ_NONE

        st.key ^= ZOBRIST.side
        st.rule50 += 1
        st.plies_from_null = 0

        self.side_to_move = opponent(self.side_to_move)
        self._set_check_info(st)
        st.repetition = 0

    def undo_null_move(self) -> None:
        if self.checkers():
            raise ValueError("a null move never leaves the side to move in check")
        if self.state.previous is None:
            raise ValueError("no null move to undo")
        self.state = self.state.previous
        self.side_to_move = opponent(self.side_to_move)

    # ---------------------------------------------------------------- queries

    def key_after(self, move: int) -> int:
        """Hash key after a plain move; castling, en passant and promotion are ignored."""
        frm = from_sq(move)
        to = to_sq(move)
        pc = self.piece_on(frm)
        captured = self.piece_on(to)
        k = self.state.key ^ ZOBRIST.side
        if captured != Piece.NO_PIECE:
            k ^= ZOBRIST.psq[captured][to]
        k ^= ZOBRIST.psq[pc][to] ^ ZOBRIST.psq[pc][frm]
        if captured != Piece.NO_PIECE or piece_type(pc) == PieceType.PAWN:
            return k
        return self._adjust_key50(k, True)

    def see_ge(self, move: int, threshold: int = VALUE_ZERO) -> bool:
        """Test whether the static exchange value of ``move`` is at least ``threshold``."""
        _require_ok(move)
        if move_type(move) != MoveType.NORMAL:
            return VALUE_ZERO >= threshold

        frm = from_sq(move)
        to = to_sq(move)

        swap = PIECE_VALUE[MG][self.piece_on(to)] - threshold
        if swap < 0:
            return False

        swap = PIECE_VALUE[MG][self.piece_on(frm)] - swap
        if swap <= 0:
            return True

        occupied = self.pieces() ^ square_bb(frm) ^ square_bb(to)
        stm = self.side_to_move
        attackers = self.attackers_to(to, occupied)
        res = 1

        while True:
            stm = opponent(stm)
            attackers &= occupied

            stm_attackers = attackers & self.pieces_of(stm)
            if not stm_attackers:
                break

            # Pinned pieces may not join while their pinners remain in place.
            if self.pinners(opponent(stm)) & occupied:
                stm_attackers &= ~self.blockers_for_king(stm)
                if not stm_attackers:
                    break

            res ^= 1

            for pt, value, xrays in _SEE_ORDER:
                bb = stm_attackers & self.pieces(pt)
                if not bb:
                    continue
                swap = value - swap
                if swap < res:
                    return bool(res)
                occupied ^= bb & -bb
                for xray in xrays:
                    attackers |= attacks_bb(xray, to, occupied) & self.pieces(
                        xray, PieceType.QUEEN
                    )
                break
            else:
                # Capturing with the king is only possible if nothing recaptures.
                if attackers & ~self.pieces_of(stm):
                    return bool(res ^ 1)
                return bool(res)

        return bool(res)

    def has_repeated(self) -> bool:
        """Whether any position repeated since the last capture, pawn or null move."""
        stc = self.state
        end = min(stc.rule50, stc.plies_from_null)
        while end >= 4:
            if stc.repetition:
                return True
            stc = stc.previous
            end -= 1
        return False

    def has_game_cycle(self, ply: int) -> bool:
        """Whether a move draws by repetition, or an earlier position could reach this one."""
        st = self.state
        end = min(st.rule50, st.plies_from_null)
        if end < 3:
            return False

        original_key = st.key
        stp = st.previous
        for i in range(3, end + 1, 2):
            stp = stp.previous.previous
            move = CUCKOO.lookup(original_key ^ stp.key)
            if move is None:
                continue
            s1 = from_sq(move)
            s2 = to_sq(move)
            if (between_bb(s1, s2) ^ square_bb(s2)) & self.pieces():
                continue
            if ply > i:
                return True
            # Both directions of a move share one slot: find which end is occupied.
            pc = self.piece_on(s2 if self.empty(s1) else s1)
            if pc == Piece.NO_PIECE or color_of(pc) != self.side_to_move:
                continue
            if stp.repetition:
                return True
        return False

    def flip(self) -> None:
        """Mirror the position, swapping the colours of all pieces and the side to move."""
        fields = self.fen().split()
        placement = "/".join(reversed(fields[0].split("/")))
        side = "B" if fields[1] == "w" else "W"
        head = f"{placement} {side} {fields[2]} ".swapcase()
        ep = fields[3]
        if ep != "-":
            ep = ep[0] + ("6" if ep[1] == "3" else "3")
        self.set(f"{head}{ep} {fields[4]} {fields[5]}", self.chess960)