# chesscore

A pure-Python chess position core: bitboards, FEN input and output
(including file-letter castling rights for Chess960), Zobrist hashing,
check and pin detection, legality testing of given moves, move making and
unmaking, null moves, repetition and upcoming-cycle detection, and static
exchange evaluation. It has no dependencies outside the standard library.

## Install

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `chesscore.types` — `Color`, `PieceType`, `Piece`, `MoveType`,
  `CastlingRights` and `Bound`; move encoding (`make_move`, `make`,
  `from_sq`, `to_sq`, `from_to`, `move_type`, `promotion_type`,
  `is_ok_move`); square helpers (`make_square`, `file_of`, `rank_of`,
  `relative_square`, `square_name`, `parse_square`, ...); mate values
  (`mate_in`, `mated_in`); `make_key`; and packed middlegame/endgame scores
  (`make_score`, `mg_value`, `eg_value`, `score_div`, `score_mul`).
- `chesscore.psqt` — piece-square tables: `build_psq()` builds the
  16×64 table, `psq_score(piece, square)` reads it.
- `chesscore.board` — bitboard helpers (`square_bb`, `popcount`, `lsb`,
  `iter_squares`, `attacks_bb`, `pawn_attacks_bb`, `between_bb`,
  `line_bb`, `aligned`, `passed_pawn_span`, ...) and `Board`, which holds
  piece placement, piece counts and the running piece-square score.
- `chesscore.state` — the `Prng` xorshift generator, `Zobrist` hash keys
  (`generate_zobrist`), the cuckoo table of reversible moves
  (`build_cuckoo`, `CuckooTable.lookup`) and the per-ply `StateInfo` record.
- `chesscore.basepos` — `PositionBase`: FEN parsing (`set`, and
  `set_endgame` for codes such as `"KBPKN"`), `fen()`, an ASCII board via
  `str()`, castling queries, checkers, pins, `legal`, `gives_check`,
  `capture`, hash keys (`key`, `pawn_key`, `material_key`) and material.
- `chesscore.position` — `Position`: `do_move`, `undo_move`,
  `do_null_move`, `undo_null_move`, `key_after`, `see_ge`,
  `has_repeated`, `has_game_cycle` and `flip`.
- `chesscore.search` — search bookkeeping records: `Stack`, `RootMove`
  (ordered by descending score) and `LimitsType`.

## Example

```python
from chesscore.position import Position
from chesscore.types import make_move, parse_square

pos = Position("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1", False)
move = make_move(parse_square("e2"), parse_square("e4"))

if pos.legal(move):
    pos.do_move(move, pos.gives_check(move))
    print(pos.fen())
    pos.undo_move(move)

print(pos)          # ASCII board, FEN, key and checkers
print(hex(pos.key()))
print(pos.see_ge(move, 0))
```

`do_move` computes `gives_check` itself when it is left out.

Moves are plain integers using a 16-bit layout: destination in bits 0–5,
origin in bits 6–11, promotion piece in bits 12–13 and the move kind in
bits 14–15. Castling is encoded as "king captures its own rook".

Malformed input raises `ValueError`: a FEN without exactly one king per
side, a castling letter with no matching rook, a bad square name, or a
move that does not start on a piece of the side to move.

## What it does not do

`legal` and `gives_check` test moves you supply; the package does not
generate moves, so there is no perft counter. It has no evaluation
function, no search algorithm, no transposition table, no endgame
tablebase probing and no engine protocol or command-line program. The
`chesscore.search` module only provides the data records a search would
keep.