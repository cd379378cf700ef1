"""Minefield model: cells, mine placement, flood reveal and flags."""

from __future__ import annotations

import random
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from itertools import product

MINE = -1
"""Value of ``Cell.adjacent_mines`` for a cell that holds a mine."""


@dataclass
class Cell:
    """State of one square of the minefield."""

    has_mine: bool = False
    is_revealed: bool = False
    is_flagged: bool = False
    adjacent_mines: int = 0


class GameBoard:
    """A rectangular minefield.

    Observers may be attached through the ``on_cell_updated(row, col)``,
    ``on_game_over(won)`` and ``on_flags_changed(flags_used)`` attributes.
    """

    def __init__(self, rows: int, cols: int, mines: int, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else random.Random()
        self.on_cell_updated: Callable[[int, int], None] | None = None
        self.on_game_over: Callable[[bool], None] | None = None
        self.on_flags_changed: Callable[[int], None] | None = None
        self._rows = 0
        self._cols = 0
        self._mines = 0
        self._flags_used = 0
        self._cells: list[list[Cell]] = []
        self.reset(rows, cols, mines)

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def mines(self) -> int:
        return self._mines

    @property
    def flags_used(self) -> int:
        return self._flags_used

    def reset(self, rows: int, cols: int, mines: int) -> None:
        """Start a fresh field of the given size with newly placed mines."""
        if rows < 1 or cols < 1:
            raise ValueError(f"board must have at least one row and column, got {rows}x{cols}")
        if not 0 <= mines <= rows * cols:
            raise ValueError(f"cannot place {mines} mines on a {rows}x{cols} board")
        self._rows = rows
        self._cols = cols
        self._mines = mines
        self._flags_used = 0
        self._cells = [[Cell() for _ in range(cols)] for _ in range(rows)]
        self._place_mines()
        self._calculate_adjacency()
        self._emit_flags_changed()

    def reveal(self, row: int, col: int) -> list[tuple[int, int]]:
        """Open a cell, flooding through empty areas.

        Returns the coordinates opened, in the order they were opened.
        Cells outside the board, already open or flagged are ignored.
        """
        if not self._in_bounds(row, col):
            return []
        revealed: list[tuple[int, int]] = []
        stack = [(row, col)]
        while stack:
            r, c = stack.pop()
            cell = self._cells[r][c]
            if cell.is_revealed or cell.is_flagged:
                continue
            cell.is_revealed = True
            revealed.append((r, c))
            self._emit_cell_updated(r, c)
            if cell.has_mine:
                self._emit_game_over(False)
                return revealed
            if cell.adjacent_mines == 0:
                stack.extend(reversed(list(self._neighbours(r, c))))
        if revealed and self.is_won():
            self._emit_game_over(True)
        return revealed

    def toggle_flag(self, row: int, col: int) -> bool:
        """Flag or unflag a closed cell; returns whether it is flagged now.

        No more flags than mines can be placed.
        """
        if not self._in_bounds(row, col):
            return False
        cell = self._cells[row][col]
        if cell.is_revealed:
            return False
        if cell.is_flagged:
            cell.is_flagged = False
            self._flags_used -= 1
        elif self._flags_used < self._mines:
            cell.is_flagged = True
            self._flags_used += 1
        self._emit_cell_updated(row, col)
        self._emit_flags_changed()
        return cell.is_flagged

    def cell(self, row: int, col: int) -> Cell:
        """Return the cell at the given position."""
        if not self._in_bounds(row, col):
            raise IndexError(f"cell ({row}, {col}) is outside a {self._rows}x{self._cols} board")
        return self._cells[row][col]

    def is_won(self) -> bool:
        """True when every cell without a mine is open."""
        return all(
            cell.has_mine or cell.is_revealed for line in self._cells for cell in line
        )

    def recount_flags(self) -> int:
        """Recompute flag count and adjacency after cells were edited directly.

        Returns the number of flags in use.
        """
        self._flags_used = sum(cell.is_flagged for line in self._cells for cell in line)
        self._calculate_adjacency()
        return self._flags_used

    def _in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self._rows and 0 <= col < self._cols

    def _neighbours(self, row: int, col: int) -> Iterator[tuple[int, int]]:
        for dr, dc in product((-1, 0, 1), repeat=2):
            if (dr, dc) == (0, 0):
                continue
            r, c = row + dr, col + dc
            if self._in_bounds(r, c):
                yield r, c

    def _place_mines(self) -> None:
        placed = 0
        while placed < self._mines:
            cell = self._cells[self._rng.randrange(self._rows)][self._rng.randrange(self._cols)]
            if not cell.has_mine:
                cell.has_mine = True
                placed += 1

    def _calculate_adjacency(self) -> None:
        for r, line in enumerate(self._cells):
            for c, cell in enumerate(line):
                if cell.has_mine:
                    cell.adjacent_mines = MINE
                else:
                    cell.adjacent_mines = sum(
                        self._cells[nr][nc].has_mine for nr, nc in self._neighbours(r, c)
                    )

    def _emit_cell_updated(self, row: int, col: int) -> None:
        if self.on_cell_updated is not None:
            self.on_cell_updated(row, col)

    def _emit_game_over(self, won: bool) -> None:
        if self.on_game_over is not None:
            self.on_game_over(won)

    def _emit_flags_changed(self) -> None:
        if self.on_flags_changed is not None:
            self.on_flags_changed(self._flags_used)