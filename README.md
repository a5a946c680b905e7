# elecsim

A small simulator for circuits built from tiles on a square grid. Each tile
sits at an integer position, faces one of four directions (`Direction.TOP`,
`RIGHT`, `BOTTOM`, `LEFT`, numbered 0 to 3) and passes on/off signals to its
neighbours.

| Tile                | Id | Behaviour                                                          |
|---------------------|----|--------------------------------------------------------------------|
| `WireTile`          | 0  | Active while any input is active; outputs in its facing direction  |
| `JunctionTile`      | 1  | Takes input from behind and fans it out to the other sides         |
| `EmitterTile`       | 2  | Toggles its output every 3 ticks; interacting disables/enables it  |
| `SemiconductorTile` | 3  | Active only when a side input and the rear input are both active   |
| `ButtonTile`        | 4  | Toggles its output when interacted with                            |
| `InverterTile`      | 5  | Active while no input is active                                    |

## Installing

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Modules

- `elecsim.tiles`: `Direction`, `flip_direction`, `rotate_direction`,
  `direction_name`, `SignalEvent`, `UpdateEvent`, the abstract `GridTile`
  and the six tile classes above, `triangle_points` (corners of the arrow a
  tile would be drawn with), and `deserialize` for tile records.
- `elecsim.grid`: `Grid`, which holds the tiles, queues and propagates
  signals, converts between world and screen coordinates, and saves and
  loads grid files.
- `elecsim.prober`: the probe script parser and runner behind the
  `elecsim-prober` command.

## Using the library

```python
from elecsim.grid import Grid
from elecsim.tiles import Direction, EmitterTile, WireTile

grid = Grid((640, 480), 32.0, (0.0, 0.0))
grid.set_tile((0, 0), EmitterTile((0, 0), Direction.RIGHT), True)
grid.set_tile((1, 0), WireTile((1, 0), Direction.RIGHT), False)
grid.reset_simulation()

updates = grid.simulate()
print(updates, grid.get((1, 0)).activated)
```

`Grid.simulate()` advances one tick: enabled emitters that are due toggle and
send their state, then every queued update is processed (highest priority
first) and the number processed is returned. `Grid.reset_simulation()` clears
the queue, resets the tick counter and every tile, and queues an "off" signal
on each input of each tile. Pass `True` as the third argument of
`Grid.set_tile` for emitters so that they are clocked.

`Grid.get(pos)` returns the tile at a position or `None`; `len(grid)`,
iteration (row by row, left to right) and `pos in grid` are supported.

### Grid files

`Grid.save(path)` writes every tile as a 16-byte record: four little-endian
32-bit integers holding the tile id, facing, x and y. `Grid.load(path)` reads
such a file, replacing the grid's contents, and resets the simulation. A
record with an unknown tile id, or a file whose length is not a multiple of
16, raises `ValueError`. Both methods report through the standard `logging`
module.

## Probing a circuit

The `elecsim-prober` command loads a saved grid, runs one simulation step and
then replays a probe script against it:

```
elecsim-prober -f circuit.grid -t circuit.probe -v
```

A probe script has one command per line; blank lines are skipped:

```
# a comment, printed when -v is given
w 0 0 1 1     write: activate the tile at (0, 0) and queue its signal towards side 1
i 2 3         interact with the tile at (2, 3)
s             advance the simulation one step
r 4 0 1       read: expect the tile at (4, 0) to be active (1) or inactive (0)
```

A write with a value other than 1 does nothing. A read of an empty position
prints `None` and does not fail. Malformed lines and unknown commands raise
`ProbeError` naming the line number.

The command exits with status 0 when every read matches, and with status 1 as
soon as one does not, or when a file cannot be read or parsed, or when `-f`
or `-t` is missing. `-h` prints the usage and `--version` the version.

The same is available from Python through `parse_commands`,
`parse_test_file` and `run_probe(grid, commands, verbose, out)`, which
returns `False` on the first failed read.

## What this package does not do

There is no graphical editor or viewer: nothing draws the grid or takes
mouse and keyboard input. `Grid` keeps a render window size, scale and offset
and converts between world and screen coordinates, and `triangle_points`
computes a tile's arrow geometry, but drawing is left to the caller.