"""Minesweeper with a Tk window and a two-player network mode."""

__version__ = "1.0.0"