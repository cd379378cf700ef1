# sapper

A classic Minesweeper game in a Tk window. Two players can share one game
over a TCP connection. The interface text is in Russian.

## Installing

```
pip install .
```

The window uses Tkinter, which ships with most Python builds.

## Playing

```
sapper
```

Options:

- `--stats PATH` names the file that keeps the win/loss statistics. By default
  this is `Stats.json` in the `Minesweeper` folder of your user configuration
  directory.

In the window:

- A left click opens a cell. A right click puts a flag on a cell or takes it
  off. You cannot place more flags than there are mines.
- The counter on the left shows how many mines are left unflagged. The counter
  on the right shows the seconds since the first click.
- The face button in the middle starts a new game.
- The game menu has three levels:
  - Beginner: 9×9, 10 mines
  - Intermediate: 16×16, 40 mines
  - Expert: 16 rows × 30 columns, 99 mines
- The extra menu shows your wins, your losses and your best winning time.

The statistics are saved as a small JSON file each time a game ends. They are
loaded again the next time the game starts.

## Network game

One player picks "create game" from the network menu and chooses a port.
The default port is 12345. The other player joins with the host's address and
the same port.

The host moves first, and the players then take turns. Each opened cell is
sent to the other player as a move. Placing or removing a flag sends the whole
board, so both players see the same field. When the other player joins, the
host's board is sent to them. During a network game the face button shows
whose turn it is: ▶ for yours, ⏸ for your opponent's.

## Using it as a library

The game logic does not depend on the window:

```python
import random
from sapper.board import GameBoard

board = GameBoard(9, 9, 10, random.Random(1))
opened = board.reveal(0, 0)      # cells opened, in order
flagged = board.toggle_flag(8, 8)
print(board.cell(0, 0), board.is_won())
```

Other modules:

- `sapper.game.Game` runs a whole session. It handles the levels
  (`Difficulty`), the clock (`tick`), turn-taking (`NotYourTurnError`),
  statistics, and messages from the other player (`handle_message`).
- `sapper.stats` has `Stats`, and `StatsStore`, which reads and writes the JSON
  statistics file.
- `sapper.protocol` reads and writes the network messages: `Move`,
  `RequestBoard` and `BoardState`, with the board packed as a `BoardSnapshot`.
- `sapper.network.NetworkManager` carries bytes over TCP. It can host one
  player or connect to one, and it reports events through callbacks.

## Limitations

- Messages go over TCP as raw bytes, with no framing. Two messages that arrive
  together are read as one and are ignored.
- Statistics are kept together for all levels, not separately for each level.