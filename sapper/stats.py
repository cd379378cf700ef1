"""Win/loss statistics and their persistence."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_path


@dataclass
class Stats:
    """Counts of games won and lost, and the best winning time in seconds."""

    wins: int = 0
    losses: int = 0
    best_time: int | None = None

    def record_win(self, seconds: int) -> None:
        self.wins += 1
        if self.best_time is None or seconds < self.best_time:
            self.best_time = seconds

    def record_loss(self) -> None:
        self.losses += 1

    def summary_lines(self) -> list[str]:
        """Lines shown in the statistics window."""
        best = "--" if self.best_time is None else str(self.best_time)
        return [
            f"Побед: {self.wins}",
            f"Поражений: {self.losses}",
            f"Лучшее время: {best}",
        ]


def _int_or(value: object, default: int | None) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return default


class StatsStore:
    """Reads and writes statistics as a small JSON file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> Stats:
        """Read saved statistics; missing or unreadable data gives defaults."""
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return Stats()
        if not isinstance(raw, dict):
            return Stats()
        return Stats(
            wins=_int_or(raw.get("wins"), 0),
            losses=_int_or(raw.get("losses"), 0),
            best_time=_int_or(raw.get("bestTime"), None),
        )

    def save(self, stats: Stats) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"wins": stats.wins, "losses": stats.losses, "bestTime": stats.best_time}
        self.path.write_text(json.dumps(payload), encoding="utf-8")


def default_stats_path() -> Path:
    """Location of the statistics file in the user's configuration directory."""
    return user_config_path("Minesweeper") / "Stats.json"