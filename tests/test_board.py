import random
from itertools import product

import pytest

from sapper.board import MINE, Cell, GameBoard


def _all_cells(board):
    return [board.cell(r, c) for r, c in product(range(board.rows), range(board.cols))]


def _board_with_mines(rows, cols, *mines):
    board = GameBoard(rows, cols, 0, random.Random(1))
    for r, c in mines:
        board.cell(r, c).has_mine = True
    board.recount_flags()
    return board


def test_cell_defaults():
    cell = Cell()
    assert (cell.has_mine, cell.is_revealed, cell.is_flagged, cell.adjacent_mines) == (
        False,
        False,
        False,
        0,
    )


@pytest.mark.parametrize("rows,cols,mines", [(9, 9, 10), (16, 16, 40), (16, 30, 99)])
def test_reset_places_exact_mine_count(rows, cols, mines):
    board = GameBoard(rows, cols, mines, random.Random(7))
    cells = _all_cells(board)
    assert len(cells) == rows * cols
    assert sum(cell.has_mine for cell in cells) == mines
    assert board.flags_used == 0


def test_mine_cells_have_mine_adjacency():
    board = GameBoard(5, 5, 6, random.Random(3))
    for cell in _all_cells(board):
        assert (cell.adjacent_mines == MINE) == cell.has_mine


def test_full_board_of_mines():
    board = GameBoard(2, 3, 6, random.Random(0))
    assert all(cell.has_mine for cell in _all_cells(board))


def test_adjacency_around_center_mine():
    board = _board_with_mines(3, 3, (1, 1))
    assert board.cell(1, 1).adjacent_mines == MINE
    others = [board.cell(r, c) for r, c in product(range(3), range(3)) if (r, c) != (1, 1)]
    assert all(cell.adjacent_mines == 1 for cell in others)


def test_flood_reveal_wins_once():
    board = _board_with_mines(3, 3, (0, 0))
    results = []
    board.on_game_over = results.append
    opened = board.reveal(2, 2)
    assert opened[0] == (2, 2)
    assert sorted(opened) == sorted(p for p in product(range(3), range(3)) if p != (0, 0))
    assert results == [True]
    assert board.is_won()
    assert not board.cell(0, 0).is_revealed


def test_reveal_numbered_cell_opens_only_it():
    board = _board_with_mines(3, 3, (0, 0))
    assert board.reveal(1, 1) == [(1, 1)]
    assert not board.is_won()


def test_reveal_mine_loses():
    board = _board_with_mines(3, 3, (0, 0))
    results = []
    updated = []
    board.on_game_over = results.append
    board.on_cell_updated = lambda r, c: updated.append((r, c))
    assert board.reveal(0, 0) == [(0, 0)]
    assert results == [False]
    assert updated == [(0, 0)]
    assert board.cell(0, 0).is_revealed


def test_reveal_ignores_out_of_range_and_open_cells():
    board = _board_with_mines(3, 3, (0, 0))
    assert board.reveal(-1, 0) == []
    assert board.reveal(0, 3) == []
    board.reveal(1, 1)
    assert board.reveal(1, 1) == []


def test_flagged_cell_is_not_revealed():
    board = GameBoard(4, 4, 3, random.Random(5))
    assert board.toggle_flag(2, 2) is True
    assert board.reveal(2, 2) == []
    assert not board.cell(2, 2).is_revealed


def test_flag_limit_and_unflag():
    board = GameBoard(4, 4, 2, random.Random(2))
    changes = []
    board.on_flags_changed = changes.append
    assert board.toggle_flag(0, 0) is True
    assert board.toggle_flag(0, 1) is True
    assert board.toggle_flag(0, 2) is False
    assert board.flags_used == board.mines
    assert board.toggle_flag(0, 0) is False
    assert board.flags_used == 1
    assert changes == [1, 2, 2, 1]


def test_cannot_flag_revealed_cell():
    board = _board_with_mines(3, 3, (0, 0))
    board.mines  # board has no flags available anyway; reveal then try
    board.reveal(1, 1)
    assert board.toggle_flag(1, 1) is False
    assert not board.cell(1, 1).is_flagged


def test_recount_flags_counts_direct_edits():
    board = GameBoard(3, 3, 2, random.Random(4))
    board.cell(0, 0).is_flagged = True
    board.cell(2, 2).is_flagged = True
    assert board.recount_flags() == 2
    assert board.flags_used == 2


def test_reset_clears_state_and_reports_flags():
    board = GameBoard(4, 4, 3, random.Random(8))
    board.toggle_flag(0, 0)
    changes = []
    board.on_flags_changed = changes.append
    board.reset(5, 6, 4)
    assert (board.rows, board.cols, board.mines, board.flags_used) == (5, 6, 4, 0)
    assert changes == [0]
    assert not any(cell.is_flagged or cell.is_revealed for cell in _all_cells(board))


@pytest.mark.parametrize("rows,cols,mines", [(0, 5, 0), (5, 0, 0), (2, 2, 5), (3, 3, -1)])
def test_invalid_configuration(rows, cols, mines):
    with pytest.raises(ValueError):
        GameBoard(rows, cols, mines, random.Random(0))


def test_cell_out_of_range():
    board = GameBoard(3, 3, 1, random.Random(0))
    with pytest.raises(IndexError):
        board.cell(3, 0)
    with pytest.raises(IndexError):
        board.cell(0, -1)


def test_same_seed_same_layout():
    first = GameBoard(9, 9, 10, random.Random(42))
    second = GameBoard(9, 9, 10, random.Random(42))
    assert _all_cells(first) == _all_cells(second)