"""Tk window for the game: field of cells, counters, menus and network play."""

from __future__ import annotations

import argparse
import queue
import tkinter as tk
from collections.abc import Callable
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from tkinter import messagebox, simpledialog

from .board import Cell
from .game import Difficulty, Game, NotYourTurnError, format_counter
from .network import DEFAULT_PORT, NetworkManager
from .stats import StatsStore, default_stats_path

CELL_SIZE = 32
CLOSED_BACKGROUND = "#c0c0c0"
EMPTY_BACKGROUND = "#e0e0e0"
NUMBER_BACKGROUND = "lightgray"
DEFAULT_FOREGROUND = "black"

NUMBER_COLOURS = (
    "",
    "#0000ff",
    "#008000",
    "#ff0000",
    "#000080",
    "#800000",
    "#008080",
    "#000000",
    "#808080",
)
"""Text colour for a revealed cell, indexed by its count of neighbouring mines."""

ICON_SYMBOLS = {"mine": "✹", "flag": "⚑"}
FACE_SYMBOL = "☺"

_FACE_NORMAL = "lightgray"
_FACE_WON = "lightgreen"
_FACE_LOST = "red"
_LCD_FONT = ("Courier", 18, "bold")
_PLAIN_FONT = ("TkDefaultFont", 8)
_NUMBER_FONT = ("TkDefaultFont", 16, "bold")
_ICON_FONT = ("TkDefaultFont", 14)
_TICK_MS = 1000
_POLL_MS = 50


@dataclass(frozen=True)
class CellLook:
    """How one cell is drawn."""

    text: str = ""
    icon: str | None = None
    background: str = CLOSED_BACKGROUND
    foreground: str = DEFAULT_FOREGROUND
    bold: bool = False
    enabled: bool = True

    @property
    def label(self) -> str:
        """Text to display: the icon's symbol when there is one."""
        return ICON_SYMBOLS[self.icon] if self.icon else self.text


def cell_look(cell: Cell) -> CellLook:
    """Appearance of a cell in its current state."""
    if not cell.is_revealed:
        return CellLook(icon="flag" if cell.is_flagged else None)
    background = EMPTY_BACKGROUND if cell.adjacent_mines == 0 else NUMBER_BACKGROUND
    if cell.has_mine:
        return CellLook(icon="mine", background=background, enabled=False)
    if cell.adjacent_mines > 0:
        return CellLook(
            text=str(cell.adjacent_mines),
            background=background,
            foreground=NUMBER_COLOURS[cell.adjacent_mines],
            bold=True,
            enabled=False,
        )
    return CellLook(background=background, enabled=False)


class MinesweeperApp:
    """Main window: builds widgets on ``root`` and drives a ``Game``."""

    def __init__(self, root: tk.Tk, stats_store: StatsStore) -> None:
        self.root = root
        self.stats_store = stats_store
        self._events: queue.Queue[Callable[[], None]] = queue.Queue()
        self.network = NetworkManager(
            on_connected=lambda: self._events.put(self._network_connected),
            on_disconnected=lambda: self._events.put(self._network_disconnected),
            on_data=lambda data: self._events.put(partial(self._network_data, data)),
            on_error=lambda message: self._events.put(partial(self._network_error, message)),
        )
        self.game = Game(Difficulty.BEGINNER, stats_store.load(), send=self.network.send_data)
        self.game.on_cell_updated = self._draw_cell
        self.game.on_game_over = self._game_over
        self.game.on_board_changed = self._board_changed

        root.title("Сапер")
        root.configure(background="silver")
        self._build_menu()
        self._build_top_panel()
        self._board_frame = tk.Frame(root, background="gray", borderwidth=2, relief=tk.SUNKEN)
        self._board_frame.pack(padx=10, pady=(0, 10))
        self._cells: list[list[tk.Label]] = []
        self._board_changed()

        root.protocol("WM_DELETE_WINDOW", self._close)
        root.after(_TICK_MS, self._tick)
        root.after(_POLL_MS, self._drain_events)

    # Layout

    def _build_menu(self) -> None:
        menubar = tk.Menu(self.root)

        game_menu = tk.Menu(menubar, tearoff=False)
        game_menu.add_command(label="Новая игра", command=self._new_game)
        game_menu.add_separator()
        for difficulty in Difficulty:
            game_menu.add_command(
                label=difficulty.label, command=partial(self._change_mode, difficulty)
            )
        menubar.add_cascade(label="Игра", menu=game_menu)

        extra_menu = tk.Menu(menubar, tearoff=False)
        extra_menu.add_command(label="Статистика", command=self._show_stats)
        extra_menu.add_command(label="Coming soon...", state=tk.DISABLED)
        menubar.add_cascade(label="Дополнительно", menu=extra_menu)

        network_menu = tk.Menu(menubar, tearoff=False)
        network_menu.add_command(label="Создать игру (Сервер)", command=self._start_server)
        network_menu.add_command(
            label="Присоединиться к игре (Клиент)", command=self._connect_to_server
        )
        menubar.add_cascade(label="Сетевая игра", menu=network_menu)

        self.root.configure(menu=menubar)

    def _build_top_panel(self) -> None:
        panel = tk.Frame(self.root, background="gray", borderwidth=2, relief=tk.SUNKEN)
        panel.pack(fill=tk.X, padx=10, pady=10)

        self._mine_counter = tk.Label(
            panel, text=format_counter(self.game.mines_left), font=_LCD_FONT,
            background="black", foreground="red", width=3,
        )
        self._mine_counter.pack(side=tk.LEFT, padx=5, pady=5)

        self._timer_label = tk.Label(
            panel, text=format_counter(0), font=_LCD_FONT,
            background="black", foreground="red", width=3,
        )
        self._timer_label.pack(side=tk.RIGHT, padx=5, pady=5)

        self._face = tk.Button(
            panel, text=FACE_SYMBOL, font=_ICON_FONT, background=_FACE_NORMAL,
            relief=tk.RAISED, command=self._new_game,
        )
        self._face.pack(side=tk.TOP, pady=5)

    def _rebuild_grid(self) -> None:
        for child in self._board_frame.winfo_children():
            child.destroy()
        board = self.game.board
        self._cells = []
        for row in range(board.rows):
            line = []
            for col in range(board.cols):
                holder = tk.Frame(self._board_frame, width=CELL_SIZE, height=CELL_SIZE)
                holder.pack_propagate(False)
                holder.grid(row=row, column=col, padx=0, pady=0)
                label = tk.Label(holder, borderwidth=2)
                label.pack(fill=tk.BOTH, expand=True)
                label.bind("<Button-1>", partial(self._on_left, row, col))
                label.bind("<Button-3>", partial(self._on_right, row, col))
                line.append(label)
            self._cells.append(line)
        self.root.minsize(board.cols * CELL_SIZE + 40, board.rows * CELL_SIZE + 150)

    # Drawing

    def _draw_cell(self, row: int, col: int) -> None:
        look = cell_look(self.game.board.cell(row, col))
        if look.bold:
            font = _NUMBER_FONT
        elif look.icon:
            font = _ICON_FONT
        else:
            font = _PLAIN_FONT
        self._cells[row][col].configure(
            text=look.label,
            background=look.background,
            foreground=look.foreground,
            font=font,
            relief=tk.RAISED if look.enabled else tk.SUNKEN,
        )

    def _board_changed(self) -> None:
        board = self.game.board
        if len(self._cells) != board.rows or any(len(line) != board.cols for line in self._cells):
            self._rebuild_grid()
        for row, line in enumerate(self._cells):
            for col in range(len(line)):
                self._draw_cell(row, col)
        self._refresh_counters()
        self._refresh_face()

    def _refresh_counters(self) -> None:
        self._mine_counter.configure(text=format_counter(self.game.mines_left))
        self._timer_label.configure(text=format_counter(self.game.time_elapsed))

    def _refresh_face(self) -> None:
        self._face.configure(text=FACE_SYMBOL + self.game.turn_marker)

    # Local play

    def _new_game(self) -> None:
        self.game.restart()
        self._face.configure(background=_FACE_NORMAL)

    def _change_mode(self, difficulty: Difficulty) -> None:
        self.game.change_mode(difficulty)
        self._face.configure(background=_FACE_NORMAL)

    def _on_left(self, row: int, col: int, _event: tk.Event | None = None) -> None:
        try:
            self.game.left_click(row, col)
        except NotYourTurnError as exc:
            messagebox.showinfo("Подождите", str(exc), parent=self.root)
            return
        self._refresh_face()

    def _on_right(self, row: int, col: int, _event: tk.Event | None = None) -> None:
        try:
            self.game.right_click(row, col)
        except NotYourTurnError as exc:
            messagebox.showinfo("Подождите", str(exc), parent=self.root)
            return
        self._refresh_counters()

    def _tick(self) -> None:
        self.game.tick()
        self._timer_label.configure(text=format_counter(self.game.time_elapsed))
        self.root.after(_TICK_MS, self._tick)

    def _game_over(self, won: bool) -> None:
        board = self.game.board
        for row, line in enumerate(self._cells):
            for col, label in enumerate(line):
                cell = board.cell(row, col)
                if cell.has_mine and not cell.is_flagged:
                    label.configure(text=ICON_SYMBOLS["mine"], font=_ICON_FONT)
                label.configure(relief=tk.SUNKEN)
        if won:
            self._face.configure(background=_FACE_WON)
            messagebox.showinfo(
                "Победа!", f"Вы выиграли за {self.game.time_elapsed} секунд!", parent=self.root
            )
        else:
            self._face.configure(background=_FACE_LOST)
            messagebox.showinfo("Поражение", "Вы наступили на мину!", parent=self.root)
        self.stats_store.save(self.game.stats)

    def _show_stats(self) -> None:
        dialog = tk.Toplevel(self.root)
        dialog.title("Статистика")
        dialog.geometry("300x200")
        dialog.resizable(False, False)
        dialog.transient(self.root)
        for line in self.game.stats.summary_lines():
            tk.Label(dialog, text=line, anchor=tk.W).pack(fill=tk.X, padx=10, pady=5)
        tk.Button(dialog, text="OK", command=dialog.destroy).pack(side=tk.BOTTOM, pady=10)
        dialog.grab_set()
        self.root.wait_window(dialog)

    # Network play

    def _start_server(self) -> None:
        port = simpledialog.askinteger(
            "Порт сервера", "Введите порт для сервера:", parent=self.root,
            initialvalue=DEFAULT_PORT, minvalue=1024, maxvalue=65535,
        )
        if port is None:
            return
        self.network.start_server(port)
        messagebox.showinfo("Сервер запущен", f"Сервер запущен на порту {port}", parent=self.root)
        self.game.host()
        self._face.configure(background=_FACE_NORMAL)
        self._refresh_face()

    def _connect_to_server(self) -> None:
        host = simpledialog.askstring(
            "Подключение к серверу", "Введите IP сервера:", parent=self.root,
            initialvalue="127.0.0.1",
        )
        if not host:
            return
        port = simpledialog.askinteger(
            "Порт сервера", "Введите порт сервера:", parent=self.root,
            initialvalue=DEFAULT_PORT, minvalue=1024, maxvalue=65535,
        )
        if port is None:
            return
        self.network.connect_to_host(host, port)

    def _network_connected(self) -> None:
        messagebox.showinfo("Подключено", "Вы успешно подключились к серверу.", parent=self.root)
        self.game.peer_connected()
        self._refresh_face()

    def _network_disconnected(self) -> None:
        messagebox.showwarning("Отключено", "Соединение потеряно.", parent=self.root)
        self.game.peer_disconnected()
        self.network.stop_server()
        self._refresh_face()

    def _network_error(self, message: str) -> None:
        messagebox.showerror("Ошибка сети", message, parent=self.root)

    def _network_data(self, data: bytes) -> None:
        self.game.handle_message(data)
        self._refresh_counters()
        self._refresh_face()

    def _drain_events(self) -> None:
        while True:
            try:
                event = self._events.get_nowait()
            except queue.Empty:
                break
            event()
        self.root.after(_POLL_MS, self._drain_events)

    def _close(self) -> None:
        self.network.stop_server()
        self.root.destroy()


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="sapper", description="Minesweeper with two-player network games.")
    parser.add_argument(
        "--stats",
        type=Path,
        default=None,
        help="file that keeps win/loss statistics",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Open the game window and run until it is closed."""
    args = _parse_args(argv)
    store = StatsStore(args.stats if args.stats is not None else default_stats_path())
    root = tk.Tk()
    MinesweeperApp(root, store)
    root.mainloop()
    return 0