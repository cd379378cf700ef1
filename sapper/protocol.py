"""Messages exchanged between two networked players."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from itertools import product
from typing import Union

from .board import GameBoard

_HEADER = struct.Struct(">iii")
_MOVE_PREFIX = b"MOVE "
_REQUEST_BOARD = b"REQUEST_BOARD"
_BOARD_STATE_PREFIX = b"BOARD_STATE "

CellState = tuple[bool, bool, bool]


@dataclass(frozen=True)
class BoardSnapshot:
    """Field size and per-cell (has_mine, is_revealed, is_flagged), row by row."""

    rows: int
    cols: int
    mines: int
    cells: tuple[CellState, ...]

    @classmethod
    def from_board(cls, board: GameBoard) -> BoardSnapshot:
        cells = tuple(
            (cell.has_mine, cell.is_revealed, cell.is_flagged)
            for cell in (
                board.cell(r, c) for r, c in product(range(board.rows), range(board.cols))
            )
        )
        return cls(board.rows, board.cols, board.mines, cells)

    def to_bytes(self) -> bytes:
        """Big-endian 32-bit rows, cols and mines, then one byte per flag."""
        body = bytes(int(flag) for state in self.cells for flag in state)
        return _HEADER.pack(self.rows, self.cols, self.mines) + body

    @classmethod
    def from_bytes(cls, data: bytes) -> BoardSnapshot:
        if len(data) < _HEADER.size:
            raise ValueError("board state is shorter than its header")
        rows, cols, mines = _HEADER.unpack_from(data)
        if rows < 1 or cols < 1:
            raise ValueError(f"invalid board size {rows}x{cols}")
        if not 0 <= mines <= rows * cols:
            raise ValueError(f"invalid mine count {mines} for a {rows}x{cols} board")
        body = data[_HEADER.size:]
        if len(body) != 3 * rows * cols:
            raise ValueError(
                f"board state holds {len(body)} cell bytes, expected {3 * rows * cols}"
            )
        it = iter(body)
        cells = tuple((bool(a), bool(b), bool(c)) for a, b, c in zip(it, it, it))
        return cls(rows, cols, mines, cells)

    def apply_to(self, board: GameBoard) -> None:
        """Make the board hold exactly this snapshot's cells."""
        if (board.rows, board.cols, board.mines) != (self.rows, self.cols, self.mines):
            board.reset(self.rows, self.cols, self.mines)
        positions = product(range(self.rows), range(self.cols))
        for (r, c), (has_mine, is_revealed, is_flagged) in zip(positions, self.cells):
            cell = board.cell(r, c)
            cell.has_mine = has_mine
            cell.is_revealed = is_revealed
            cell.is_flagged = is_flagged
        board.recount_flags()


@dataclass(frozen=True)
class Move:
    """The peer opened a cell."""

    row: int
    col: int


@dataclass(frozen=True)
class RequestBoard:
    """The peer asks for the current board state."""


@dataclass(frozen=True)
class BoardState:
    """The peer sent the whole board."""

    snapshot: BoardSnapshot


Message = Union[Move, RequestBoard, BoardState]


def parse_message(data: bytes) -> Message | None:
    """Decode one received message; unknown or malformed data gives None."""
    if data.startswith(_BOARD_STATE_PREFIX):
        try:
            return BoardState(BoardSnapshot.from_bytes(data[len(_BOARD_STATE_PREFIX):]))
        except ValueError:
            return None
    if data == _REQUEST_BOARD:
        return RequestBoard()
    if data.startswith(_MOVE_PREFIX):
        parts = data.split(b" ")
        if len(parts) != 3:
            return None
        try:
            return Move(int(parts[1]), int(parts[2]))
        except ValueError:
            return None
    return None


def encode_move(row: int, col: int) -> bytes:
    return b"MOVE %d %d" % (row, col)


def encode_request_board() -> bytes:
    return _REQUEST_BOARD


def encode_board_state(snapshot: BoardSnapshot) -> bytes:
    return _BOARD_STATE_PREFIX + snapshot.to_bytes()