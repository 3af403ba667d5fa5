import pytest

from chesscore.basepos import START_FEN, PositionBase
from chesscore.board import attacks_bb, square_bb
from chesscore.state import ZOBRIST
from chesscore.types import (
    BISHOP_VALUE_MG,
    KNIGHT_VALUE_MG,
    QUEEN_VALUE_MG,
    ROOK_VALUE_MG,
    SQ_NONE,
    CastlingRights,
    Color,
    MoveType,
    Piece,
    PieceType,
    make,
    make_move,
    parse_square,
    square_name,
)


def sq(name):
    return parse_square(name)


@pytest.mark.parametrize(
    "fen",
    [
        START_FEN,
        "rnbqkbnr/pppp1ppp/8/4p3/4P3/8/PPPP1PPP/RNBQKBNR w KQkq - 0 2",
        "rnbqkbnr/ppp1pppp/8/8/3pP3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 3",
        "r3k2r/8/8/8/8/8/8/R3K2R w Kq - 12 40",
        "4k3/8/8/8/8/8/8/4K3 b - - 0 1",
    ],
)
def test_fen_round_trip(fen):
    assert PositionBase(fen).fen() == fen


def test_fullmove_zero_is_accepted():
    fen = "4k3/8/8/8/8/8/8/4K3 w - - 0 0"
    pos = PositionBase(fen)
    assert pos.game_ply == 0
    assert pos.fen() == fen[:-1] + "1"


def test_black_to_move_game_ply():
    pos = PositionBase("4k3/8/8/8/8/8/8/4K3 b - - 0 1")
    assert pos.game_ply == 1
    assert pos.side_to_move == Color.BLACK


def test_valid_en_passant_square_kept():
    fen = "rnbqkbnr/ppp1pppp/8/8/3pP3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 3"
    with_ep = PositionBase(fen)
    without_ep = PositionBase(fen.replace(" e3 ", " - "))
    assert with_ep.ep_square() == sq("e3")
    assert with_ep.key() ^ without_ep.key() == ZOBRIST.enpassant[4]


def test_useless_en_passant_square_dropped():
    fen = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"
    pos = PositionBase(fen)
    assert pos.ep_square() == SQ_NONE
    assert pos.fen() == fen.replace(" e3 ", " - ")


def test_chess960_uses_shredder_castling():
    pos = PositionBase(START_FEN, chess960=True)
    assert pos.fen().split()[2] == "HAha"
    again = PositionBase(pos.fen(), chess960=True)
    assert again.key() == pos.key()
    assert again.castling_rook_square(CastlingRights.WHITE_OOO) == sq("a1")


def test_castling_rights_and_rook_squares():
    pos = PositionBase(START_FEN)
    assert pos.castling_rights(Color.WHITE) == CastlingRights.WHITE_CASTLING
    assert pos.castling_rights(Color.BLACK) == CastlingRights.BLACK_CASTLING
    assert pos.castling_rook_square(CastlingRights.WHITE_OO) == sq("h1")
    assert pos.castling_rook_square(CastlingRights.BLACK_OOO) == sq("a8")
    assert pos.can_castle(CastlingRights.ANY_CASTLING)


def test_castling_impeded():
    assert PositionBase(START_FEN).castling_impeded(CastlingRights.WHITE_OO)
    open_pos = PositionBase("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    assert not open_pos.castling_impeded(CastlingRights.WHITE_OO)
    assert not open_pos.castling_impeded(CastlingRights.BLACK_OOO)


def test_castling_query_rejects_combined_rights():
    pos = PositionBase(START_FEN)
    with pytest.raises(ValueError):
        pos.castling_impeded(CastlingRights.WHITE_CASTLING)
    with pytest.raises(ValueError):
        pos.castling_rook_square(CastlingRights.ANY_CASTLING)


def test_missing_king_rejected():
    with pytest.raises(ValueError):
        PositionBase("8/8/8/8/8/8/8/4K3 w - - 0 1")


def test_empty_fen_rejected():
    with pytest.raises(ValueError):
        PositionBase("   ")


def test_side_key_difference():
    white = PositionBase("4k3/8/8/8/8/8/8/4K3 w - - 0 1")
    black = PositionBase("4k3/8/8/8/8/8/8/4K3 b - - 0 1")
    assert white.key() ^ black.key() == ZOBRIST.side


def test_rule50_key_adjustment():
    base = "4k3/8/8/8/8/8/8/4K3 w - - {} 60"
    keys = {n: PositionBase(base.format(n)).key() for n in (0, 13, 14, 21, 22)}
    assert keys[0] == keys[13]
    assert keys[13] != keys[14]
    assert keys[14] == keys[21]
    assert keys[21] != keys[22]


def test_pawn_and_material_keys():
    with_knight = PositionBase("4k3/8/8/8/8/8/4P3/4K1N1 w - - 0 1")
    without = PositionBase("4k3/8/8/8/8/8/4P3/4K3 w - - 0 1")
    moved = PositionBase("4k3/8/8/8/8/8/4P3/4KN2 w - - 0 1")
    assert with_knight.pawn_key() == without.pawn_key()
    assert with_knight.material_key() != without.material_key()
    assert with_knight.material_key() == moved.material_key()
    assert with_knight.key() != moved.key()


def test_non_pawn_material_start():
    pos = PositionBase(START_FEN)
    per_side = 2 * KNIGHT_VALUE_MG + 2 * BISHOP_VALUE_MG + 2 * ROOK_VALUE_MG + QUEEN_VALUE_MG
    assert pos.non_pawn_material(Color.WHITE) == per_side
    assert pos.non_pawn_material(Color.BLACK) == per_side
    assert pos.non_pawn_material() == 2 * per_side


def test_psq_eg_stm_symmetry():
    assert PositionBase(START_FEN).psq_eg_stm() == 0
    white = PositionBase("4k3/8/8/8/8/8/8/Q3K3 w - - 0 1").psq_eg_stm()
    black = PositionBase("4k3/8/8/8/8/8/8/Q3K3 b - - 0 1").psq_eg_stm()
    assert white > 0
    assert black == -white


def test_checkers_and_str():
    pos = PositionBase("4k3/8/8/8/8/8/8/4K2r w - - 0 1")
    assert pos.checkers() == square_bb(sq("h1"))
    text = str(pos)
    assert "Fen: " + pos.fen() in text
    assert f"Key: {pos.key():016X}" in text
    assert "Checkers: " + square_name(sq("h1")) + " " in text


def test_check_squares():
    pos = PositionBase(START_FEN)
    assert pos.check_squares(PieceType.KNIGHT) == attacks_bb(PieceType.KNIGHT, sq("e8"))
    assert pos.check_squares(PieceType.QUEEN) == (
        pos.check_squares(PieceType.BISHOP) | pos.check_squares(PieceType.ROOK)
    )
    assert pos.check_squares(PieceType.KING) == 0


def test_pinned_piece():
    pos = PositionBase("4k3/4r3/8/8/8/8/4N3/4K3 w - - 0 1")
    assert pos.blockers_for_king(Color.WHITE) == square_bb(sq("e2"))
    assert pos.pinners(Color.BLACK) == square_bb(sq("e7"))
    assert not pos.legal(make_move(sq("e2"), sq("c3")))
    assert pos.legal(make_move(sq("e1"), sq("d1")))


def test_king_cannot_step_into_attack():
    pos = PositionBase("3rk3/8/8/8/8/8/8/4K3 w - - 0 1")
    assert not pos.legal(make_move(sq("e1"), sq("d1")))
    assert pos.legal(make_move(sq("e1"), sq("f1")))


def test_castling_legality():
    pos = PositionBase("r3kr2/8/8/8/8/8/8/R3K2R w KQ - 0 1")
    assert not pos.legal(make(MoveType.CASTLING, sq("e1"), sq("h1")))
    assert pos.legal(make(MoveType.CASTLING, sq("e1"), sq("a1")))


def test_en_passant_legality_with_rank_pin():
    pinned = PositionBase("8/8/8/KPp4r/8/8/8/4k3 w - c6 0 1")
    free = PositionBase("8/8/8/KPp5/8/8/8/4k3 w - c6 0 1")
    move = make(MoveType.EN_PASSANT, sq("b5"), sq("c6"))
    assert pinned.ep_square() == sq("c6")
    assert not pinned.legal(move)
    assert free.legal(move)
    assert free.capture(move)


def test_legal_rejects_move_of_wrong_side():
    pos = PositionBase(START_FEN)
    with pytest.raises(ValueError):
        pos.legal(make_move(sq("e7"), sq("e5")))


def test_capture_and_moved_piece():
    pos = PositionBase("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    assert pos.capture(make_move(sq("a1"), sq("a8")))
    assert not pos.capture(make(MoveType.CASTLING, sq("e1"), sq("h1")))
    assert pos.moved_piece(make_move(sq("a1"), sq("a8"))) == Piece.W_ROOK
    assert pos.captured_piece() == Piece.NO_PIECE


def test_direct_check():
    pos = PositionBase("4k3/8/8/8/8/8/8/R3K3 w - - 0 1")
    assert pos.gives_check(make_move(sq("a1"), sq("a8")))
    assert not pos.gives_check(make_move(sq("a1"), sq("a2")))


def test_discovered_check():
    knight = PositionBase("4k3/8/8/8/8/8/4N3/4R1K1 w - - 0 1")
    assert knight.gives_check(make_move(sq("e2"), sq("c3")))
    pawn = PositionBase("4k3/8/8/8/8/8/4P3/4R1K1 w - - 0 1")
    assert not pawn.gives_check(make_move(sq("e2"), sq("e3")))


def test_promotion_check():
    pos = PositionBase("4k3/1P6/8/8/8/8/8/4K3 w - - 0 1")
    assert pos.gives_check(make(MoveType.PROMOTION, sq("b7"), sq("b8"), PieceType.QUEEN))
    assert not pos.gives_check(make(MoveType.PROMOTION, sq("b7"), sq("b8"), PieceType.KNIGHT))


def test_castling_check():
    pos = PositionBase("5k2/8/8/8/8/8/8/4K2R w K - 0 1")
    assert pos.gives_check(make(MoveType.CASTLING, sq("e1"), sq("h1")))


def test_set_endgame_material():
    pos = PositionBase(START_FEN).set_endgame("KBPKN", Color.WHITE)
    assert pos.count(Color.WHITE, PieceType.BISHOP) == 1
    assert pos.count(Color.WHITE, PieceType.PAWN) == 1
    assert pos.count(Color.BLACK, PieceType.KNIGHT) == 1
    same = PositionBase("8/8/3k4/8/2n5/8/1B1P4/5K2 w - - 0 1")
    assert pos.material_key() == same.material_key()


def test_set_endgame_strong_black_and_v_separator():
    pos = PositionBase(START_FEN).set_endgame("KBPKN", Color.BLACK)
    assert pos.count(Color.BLACK, PieceType.BISHOP) == 1
    assert pos.count(Color.WHITE, PieceType.KNIGHT) == 1
    rook = PositionBase(START_FEN).set_endgame("KRvK", Color.WHITE)
    assert rook.count(Color.WHITE, PieceType.ROOK) == 1
    assert rook.count(Color.BLACK, PieceType.ALL_PIECES) == 1


@pytest.mark.parametrize("code", ["QK", "K", "KBBBBBBBBK"])
def test_set_endgame_rejects_bad_codes(code):
    with pytest.raises(ValueError):
        PositionBase(START_FEN).set_endgame(code, Color.WHITE)


def test_pos_is_ok_start():
    assert PositionBase(START_FEN).pos_is_ok()