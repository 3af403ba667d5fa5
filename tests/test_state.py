import pytest

from chesscore.state import (
    CUCKOO,
    ZOBRIST,
    CuckooTable,
    Prng,
    StateInfo,
    build_cuckoo,
    generate_zobrist,
)
from chesscore.types import (
    PIECES,
    SQ_NONE,
    Piece,
    make_move,
    parse_square,
)


def test_prng_is_deterministic():
    a, b = Prng(1070372), Prng(1070372)
    assert [a.rand() for _ in range(10)] == [b.rand() for _ in range(10)]


def test_prng_values_are_64_bit_and_vary():
    rng = Prng(1070372)
    values = [rng.rand() for _ in range(100)]
    assert all(0 <= v < 1 << 64 for v in values)
    assert len(set(values)) == len(values)


def test_prng_seeds_differ():
    assert Prng(1).rand() != Prng(2).rand()


def test_prng_rejects_zero_seed():
    with pytest.raises(ValueError):
        Prng(0)


def test_zobrist_unused_rows_are_zero():
    zobrist = generate_zobrist()
    for index in (Piece.NO_PIECE, 7, 8, 15):
        assert all(k == 0 for k in zobrist.psq[index])


def test_zobrist_keys_are_distinct():
    zobrist = generate_zobrist()
    keys = [zobrist.psq[pc][s] for pc in PIECES for s in range(64)]
    keys += list(zobrist.enpassant) + list(zobrist.castling) + [zobrist.side, zobrist.no_pawns]
    assert len(set(keys)) == len(keys)


def test_generate_zobrist_default_seed_is_reproducible():
    assert generate_zobrist() == ZOBRIST
    assert generate_zobrist(7) != ZOBRIST


def test_cuckoo_holds_every_reversible_move():
    table = build_cuckoo(generate_zobrist())
    assert table.count == 3668
    stored = sum(1 for m in table.moves if m)
    assert stored == 3668


def test_cuckoo_lookup_finds_knight_move():
    b1, c3 = parse_square("b1"), parse_square("c3")
    key = ZOBRIST.psq[Piece.W_KNIGHT][b1] ^ ZOBRIST.psq[Piece.W_KNIGHT][c3] ^ ZOBRIST.side
    assert CUCKOO.lookup(key) == make_move(b1, c3)


def test_cuckoo_lookup_round_trips_stored_keys():
    for key, move in zip(CUCKOO.keys, CUCKOO.moves):
        if move:
            assert CUCKOO.lookup(key) == move


def test_cuckoo_lookup_misses():
    assert CUCKOO.lookup(ZOBRIST.side) is None
    assert CuckooTable().lookup(0) is None


def test_build_cuckoo_is_reproducible():
    table = build_cuckoo(ZOBRIST)
    assert table.keys == CUCKOO.keys
    assert table.moves == CUCKOO.moves


def test_copy_for_move_keeps_only_carried_fields():
    st = StateInfo(rule50=5, pawn_key=11, key=99, repetition=4, ep_square=parse_square("e3"))
    st.non_pawn_material[0] = 500
    new = st.copy_for_move()
    assert new.previous is st
    assert new.rule50 == 5
    assert new.pawn_key == 11
    assert new.ep_square == parse_square("e3")
    assert new.key == 0
    assert new.repetition == 0
    assert new.non_pawn_material == [500, 0]
    new.non_pawn_material[0] = 0
    assert st.non_pawn_material == [500, 0]


def test_copy_for_null_move_keeps_everything():
    st = StateInfo(key=99, checkers_bb=0, repetition=2, captured_piece=Piece.B_ROOK)
    st.check_squares[1] = 3
    new = st.copy_for_null_move()
    assert new.previous is st
    assert new.key == 99
    assert new.repetition == 2
    assert new.captured_piece == Piece.B_ROOK
    assert new.check_squares == st.check_squares
    new.check_squares[1] = 0
    assert st.check_squares[1] == 3


def test_default_state_has_no_ep_square():
    assert StateInfo().ep_square == SQ_NONE
    assert StateInfo().previous is None