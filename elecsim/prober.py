"""Run a scripted probe against a saved grid and check tile states.

A probe script has one command per line:

    w x y (1/0) s   write a signal from the tile at x y towards side s
    i x y           interact with the tile at x y
    s               step the simulation
    r x y (1/0)     read the tile at x y and compare with the expected state
    # text          a comment, printed in verbose mode
"""

from __future__ import annotations

import argparse
import re
import sys
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TextIO

from elecsim.grid import Grid
from elecsim.tiles import Direction, SignalEvent

PROG_NAME = "Prober"
PROG_DESC = "Prober is a tool for simulating elecSim circuits."
PROG_VERSION = "0.1"

_INT = re.compile(r"[ \t\n\v\f\r]*(-?\d+)")
_WHITESPACE = " \t\n\v\f\r"
_INT_MIN, _INT_MAX = -(2**31), 2**31 - 1
_STATE_NAMES = {True: "active", False: "inactive"}


class ProbeError(Exception):
    """A probe script could not be read or parsed."""


class CommandType(Enum):
    WRITE = "Write"
    INTERACT = "Interact"
    STEP = "Step"
    READ = "Read"
    COMMENT = "Comment"


@dataclass(frozen=True)
class Command:
    type: CommandType
    x: int = 0
    y: int = 0
    value: int = 0
    direction: Direction = Direction.TOP
    comment: str = ""


def _read_ints(text: str, count: int) -> Optional[list[int]]:
    values = []
    pos = 0
    for _ in range(count):
        match = _INT.match(text, pos)
        if match is None:
            return None
        value = int(match.group(1))
        if not _INT_MIN <= value <= _INT_MAX:
            return None
        values.append(value)
        pos = match.end()
    return values


def parse_commands(lines: Iterable[str]) -> list[Command]:
    """Parse probe script lines into commands."""
    commands: list[Command] = []
    for line_no, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n").lstrip(_WHITESPACE)
        if not line:
            continue
        cmd, rest = line[0], line[1:]
        if cmd == "#":
            if rest:
                commands.append(Command(CommandType.COMMENT, comment=rest))
        elif cmd == "w":
            values = _read_ints(rest, 4)
            if values is None or values[3] not in Direction._value2member_map_:
                raise ProbeError(f"Malformed write command at line {line_no}")
            x, y, value, side = values
            commands.append(Command(CommandType.WRITE, x, y, value, Direction(side)))
        elif cmd == "i":
            values = _read_ints(rest, 2)
            if values is None:
                raise ProbeError(f"Malformed interact command at line {line_no}")
            commands.append(Command(CommandType.INTERACT, *values))
        elif cmd == "s":
            commands.append(Command(CommandType.STEP))
        elif cmd == "r":
            values = _read_ints(rest, 3)
            if values is None:
                raise ProbeError(f"Malformed read command at line {line_no}")
            commands.append(Command(CommandType.READ, *values))
        else:
            raise ProbeError(f"Unknown command '{cmd}' at line {line_no}")
    return commands


def parse_test_file(path) -> list[Command]:
    """Read and parse a probe script file."""
    try:
        with open(path, encoding="utf-8") as fh:
            return parse_commands(fh)
    except OSError as exc:
        raise ProbeError(f"Could not open test file: {path}") from exc


def command_string(command: Command) -> str:
    return f"{command.type.value} {command.x} {command.y} {command.value}"


def run_probe(
    grid: Grid,
    commands: Iterable[Command],
    verbose: bool = False,
    out: Optional[TextIO] = None,
) -> bool:
    """Execute ``commands`` on ``grid``; return False on the first failed read."""
    out = sys.stdout if out is None else out
    for command in commands:
        tile = grid.get((command.x, command.y))
        if command.type is CommandType.WRITE:
            if tile is not None and command.value == 1:
                tile.activated = True
                grid.queue_update(
                    tile, SignalEvent(tile.pos, command.direction, True)
                )
        elif command.type is CommandType.INTERACT:
            if tile is not None:
                for signal in tile.interact():
                    grid.queue_update(tile, signal)
        elif command.type is CommandType.STEP:
            grid.simulate()
        elif command.type is CommandType.READ:
            expected = _STATE_NAMES[bool(command.value)]
            out.write(
                f"Tile at ({command.x}, {command.y}):\n"
                f"  Expected: {expected}\n  Actual: "
            )
            if tile is None:
                out.write("None")
            else:
                out.write(_STATE_NAMES[bool(tile.activated)])
                if int(tile.activated) != command.value:
                    out.write(" (Test failed)")
                    return False
            out.write("\n")
        elif command.type is CommandType.COMMENT and verbose:
            out.write(command.comment + "\n")
    out.write("Test completed successfully.\n")
    return True


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG_NAME.lower(), description=PROG_DESC, add_help=False
    )
    parser.add_argument("-f", dest="grid_file", help="Grid file to load")
    parser.add_argument("-t", dest="test_file", help="Test behavior file to load")
    parser.add_argument(
        "-v", dest="verbose", action="store_true",
        help="Verbose mode: Print the log event",
    )
    parser.add_argument(
        "-h", dest="help", action="store_true", help="Show this help message"
    )
    parser.add_argument(
        "--version", action="version", version=f"{PROG_NAME} {PROG_VERSION}"
    )
    return parser


def main(argv=None) -> int:
    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return 0 if not exc.code else 1
    if args.help:
        parser.print_help(sys.stdout)
        return 0
    if args.grid_file is None or args.test_file is None:
        print(f"{parser.prog}: both -f and -t are required", file=sys.stderr)
        return 1

    grid = Grid()
    try:
        grid.load(args.grid_file)
        grid.simulate()
        commands = parse_test_file(args.test_file)
    except (OSError, ValueError, ProbeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0 if run_probe(grid, commands, args.verbose, sys.stdout) else 1


if __name__ == "__main__":
    sys.exit(main())