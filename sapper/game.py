"""A game session: difficulty, timer, turns, statistics and peer messages."""

from __future__ import annotations

import random
from collections.abc import Callable
from enum import Enum

from .board import GameBoard
from .protocol import (
    BoardSnapshot,
    BoardState,
    Message,
    Move,
    RequestBoard,
    encode_board_state,
    encode_move,
    encode_request_board,
    parse_message,
)
from .stats import Stats

MY_TURN_MARK = "▶"
THEIR_TURN_MARK = "⏸"


class Difficulty(Enum):
    """Preset field sizes: rows, columns, mines and menu label."""

    BEGINNER = (9, 9, 10, "Новичок (9x9, 10 мин)")
    INTERMEDIATE = (16, 16, 40, "Любитель (16x16, 40 мин)")
    EXPERT = (16, 30, 99, "Профессионал (30x16, 99 мин)")

    def __init__(self, rows: int, cols: int, mines: int, label: str) -> None:
        self.rows = rows
        self.cols = cols
        self.mines = mines
        self.label = label


class NotYourTurnError(Exception):
    """Raised when a player acts during the peer's turn."""

    def __init__(self) -> None:
        super().__init__("Сейчас не ваш ход!")


def format_counter(value: int) -> str:
    """Three-digit zero-padded display of a counter."""
    return f"{value:03d}"


class Game:
    """One player's view of a game, local or shared with a peer.

    Observers: ``on_cell_updated(row, col)``, ``on_game_over(won)`` and
    ``on_board_changed()`` for whole-board redraws.
    """

    def __init__(
        self,
        difficulty: Difficulty = Difficulty.BEGINNER,
        stats: Stats | None = None,
        rng: random.Random | None = None,
        send: Callable[[bytes], None] | None = None,
    ) -> None:
        self.stats = stats if stats is not None else Stats()
        self.difficulty = difficulty
        self._send = send
        self.on_cell_updated: Callable[[int, int], None] | None = None
        self.on_game_over: Callable[[bool], None] | None = None
        self.on_board_changed: Callable[[], None] | None = None
        self.time_elapsed = 0
        self.timer_running = False
        self.finished = False
        self.is_network_game = False
        self.is_my_turn = False
        self.board = GameBoard(difficulty.rows, difficulty.cols, difficulty.mines, rng)
        self.board.on_cell_updated = self._cell_updated
        self.board.on_game_over = self._game_over
        self.restart()

    @property
    def mines_left(self) -> int:
        return self.board.mines - self.board.flags_used

    @property
    def turn_marker(self) -> str:
        """Turn indicator for a network game, empty otherwise."""
        if not self.is_network_game:
            return ""
        return MY_TURN_MARK if self.is_my_turn else THEIR_TURN_MARK

    def change_mode(self, difficulty: Difficulty) -> None:
        """Switch to another preset and start a new round."""
        self.difficulty = difficulty
        self._new_round(difficulty.rows, difficulty.cols, difficulty.mines)

    def restart(self) -> None:
        """Start a new round on a field of the current size."""
        self._new_round(self.board.rows, self.board.cols, self.board.mines)

    def left_click(self, row: int, col: int) -> list[tuple[int, int]]:
        """Open a cell; returns the cells opened."""
        if self.finished:
            return []
        self._check_turn()
        if self.time_elapsed == 0:
            self.timer_running = True
        revealed = self.board.reveal(row, col)
        if self.is_network_game:
            self._transmit(encode_move(row, col))
            self.is_my_turn = False
        return revealed

    def right_click(self, row: int, col: int) -> bool:
        """Toggle a flag; returns whether the cell is flagged now."""
        if self.finished:
            return False
        self._check_turn()
        flagged = self.board.toggle_flag(row, col)
        if self.is_network_game:
            self._send_board_state()
        return flagged

    def tick(self) -> int:
        """Advance the clock by one second while it runs; returns elapsed seconds."""
        if self.timer_running:
            self.time_elapsed += 1
        return self.time_elapsed

    def host(self) -> None:
        """Become the hosting side, which moves first, and start a new round."""
        self.is_network_game = True
        self.is_my_turn = True
        self.restart()

    def peer_connected(self) -> None:
        """The host shares its board; the joining side asks for it."""
        self.is_network_game = True
        if self.is_my_turn:
            self._send_board_state()
        else:
            self._transmit(encode_request_board())

    def peer_disconnected(self) -> None:
        self.is_network_game = False
        self.is_my_turn = False

    def handle_message(self, data: bytes) -> Message | None:
        """Act on bytes from the peer; returns the decoded message, if any."""
        message = parse_message(data)
        if isinstance(message, BoardState):
            message.snapshot.apply_to(self.board)
            self.finished = False
            self._emit_board_changed()
        elif isinstance(message, RequestBoard):
            self._send_board_state()
        elif isinstance(message, Move):
            self.board.reveal(message.row, message.col)
            self.is_my_turn = True
        return message

    def _new_round(self, rows: int, cols: int, mines: int) -> None:
        self.board.reset(rows, cols, mines)
        self.timer_running = False
        self.time_elapsed = 0
        self.finished = False
        self._emit_board_changed()

    def _check_turn(self) -> None:
        if self.is_network_game and not self.is_my_turn:
            raise NotYourTurnError()

    def _send_board_state(self) -> None:
        self._transmit(encode_board_state(BoardSnapshot.from_board(self.board)))

    def _transmit(self, data: bytes) -> None:
        if self._send is not None:
            self._send(data)

    def _cell_updated(self, row: int, col: int) -> None:
        if self.on_cell_updated is not None:
            self.on_cell_updated(row, col)

    def _game_over(self, won: bool) -> None:
        self.timer_running = False
        if self.finished:
            return
        self.finished = True
        if won:
            self.stats.record_win(self.time_elapsed)
        else:
            self.stats.record_loss()
        if self.on_game_over is not None:
            self.on_game_over(won)

    def _emit_board_changed(self) -> None:
        if self.on_board_changed is not None:
            self.on_board_changed()