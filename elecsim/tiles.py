"""Tile types of the electricity grid and the signals that pass between them."""

from __future__ import annotations

import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Optional

Position = tuple[int, int]
Color = tuple[int, int, int]
Point = tuple[float, float]

TILE_BYTESIZE = 16
_RECORD = struct.Struct("<iiii")  # tile id, facing, x, y

BLACK: Color = (0, 0, 0)
WHITE: Color = (255, 255, 255)
GREY: Color = (192, 192, 192)
RED: Color = (255, 0, 0)
DARK_RED: Color = (128, 0, 0)
YELLOW: Color = (255, 255, 0)
DARK_YELLOW: Color = (128, 128, 0)
GREEN: Color = (0, 255, 0)
DARK_GREEN: Color = (0, 128, 0)
CYAN: Color = (0, 255, 255)
DARK_CYAN: Color = (0, 128, 128)
MAGENTA: Color = (255, 0, 255)
DARK_MAGENTA: Color = (128, 0, 128)


class Direction(IntEnum):
    """The four sides of a tile, clockwise from the top."""

    TOP = 0
    RIGHT = 1
    BOTTOM = 2
    LEFT = 3


_DIRECTION_COUNT = len(Direction)


def flip_direction(direction: Direction) -> Direction:
    """Return the opposite side."""
    return Direction((int(direction) + 2) % _DIRECTION_COUNT)


def rotate_direction(direction: Direction, facing: Direction) -> Direction:
    """Rotate a tile-local direction clockwise by the amount of ``facing``."""
    return Direction((int(direction) + int(facing)) % _DIRECTION_COUNT)


def direction_name(direction: int) -> str:
    """Return the display name of a direction, or ``"Unknown"``."""
    try:
        return Direction(direction).name.capitalize()
    except ValueError:
        return "Unknown"


@dataclass(init=False)
class SignalEvent:
    """A signal leaving ``source_pos``; it arrives from ``from_direction``."""

    source_pos: Position
    from_direction: Direction
    is_active: bool

    def __init__(self, pos: Position, direction: Direction, active: bool) -> None:
        self.source_pos = (int(pos[0]), int(pos[1]))
        self.from_direction = flip_direction(direction)
        self.is_active = bool(active)


@dataclass
class UpdateEvent:
    """A queued signal for a tile; higher priority is handled first."""

    tile: Optional["GridTile"]
    event: SignalEvent
    priority: int = 0

    def __lt__(self, other: "UpdateEvent") -> bool:
        return self.priority < other.priority


def triangle_points(
    screen_pos: Point, screen_size: int, facing: Direction
) -> tuple[Point, Point, Point]:
    """Corners of the arrow triangle drawn on a tile pointing to ``facing``."""
    x, y = float(screen_pos[0]), float(screen_pos[1])
    size = int(screen_size)
    half = size // 2
    if facing == Direction.RIGHT:
        return ((x + size, y + half), (x, y + size), (x, y))
    if facing == Direction.BOTTOM:
        return ((x + half, y + size), (x, y), (x + size, y))
    if facing == Direction.LEFT:
        return ((x, y + half), (x + size, y), (x + size, y + size))
    return ((x + half, y), (x + size, y + size), (x, y + size))


class GridTile(ABC):
    """Base of every tile: position, facing, activation and port permissions."""

    name: ClassVar[str] = "Tile"
    tile_id: ClassVar[int] = -1
    is_emitter: ClassVar[bool] = False
    inactive_color: ClassVar[Color] = BLACK
    active_color: ClassVar[Color] = BLACK
    default_size: ClassVar[float] = 1.0

    def __init__(
        self,
        pos: Position = (0, 0),
        facing: Direction = Direction.TOP,
        size: Optional[float] = None,
        default_activation: bool = False,
    ) -> None:
        self.pos: Position = (int(pos[0]), int(pos[1]))
        self.facing = Direction(facing)
        self.size = self.default_size if size is None else float(size)
        self.activated = bool(default_activation)
        self.default_activation = bool(default_activation)
        self.can_receive = [False] * _DIRECTION_COUNT
        self.can_output = [False] * _DIRECTION_COUNT
        self.input_states = [False] * _DIRECTION_COUNT

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(pos={self.pos}, facing={self.facing.name}, "
            f"activated={self.activated})"
        )

    @abstractmethod
    def process_signal(self, signal: SignalEvent) -> list[SignalEvent]:
        """Take an incoming signal and return the signals it causes."""

    def interact(self) -> list[SignalEvent]:
        """React to the user clicking the tile; return the signals it causes."""
        return []

    def turn_to(self, facing: Direction) -> None:
        """Face a new direction, rotating the port permissions with it."""
        facing = Direction(facing)
        if facing == self.facing:
            return
        self.facing = facing
        old_receive = list(self.can_receive)
        old_output = list(self.can_output)
        for direction in Direction:
            target = rotate_direction(direction, facing)
            self.can_receive[target] = old_receive[direction]
            self.can_output[target] = old_output[direction]

    def reset_activation(self) -> None:
        """Return to the default activation and forget all inputs."""
        self.activated = self.default_activation
        self.input_states = [False] * _DIRECTION_COUNT

    def can_receive_from(self, direction: Direction) -> bool:
        return self.can_receive[direction]

    def can_send_to(self, direction: Direction) -> bool:
        return self.can_output[direction]

    def information(self) -> str:
        """A one-line description of the tile."""
        x, y = self.pos
        return (
            f"Tile Type: {self.name}, Position: ({x}, {y}), "
            f"Facing: {int(self.facing)}, Size: {self.size:g}, "
            f"Activated: {int(self.activated)}"
        )

    def serialize(self) -> bytes:
        """Encode id, facing and position as a fixed-size record."""
        x, y = self.pos
        return _RECORD.pack(self.tile_id, int(self.facing), x, y)

    def _record_input(self, signal: SignalEvent) -> None:
        self.input_states[flip_direction(signal.from_direction)] = signal.is_active

    def _any_input_active(self) -> bool:
        return any(
            receive and state
            for receive, state in zip(self.can_receive, self.input_states)
        )

    def _emit(self, active: bool) -> SignalEvent:
        return SignalEvent(self.pos, self.facing, active)


class WireTile(GridTile):
    """Conducts a signal from any side towards its facing."""

    name = "Wire"
    tile_id = 0
    inactive_color = WHITE
    active_color = DARK_YELLOW

    def __init__(
        self,
        pos: Position = (0, 0),
        facing: Direction = Direction.TOP,
        size: Optional[float] = None,
    ) -> None:
        super().__init__(pos, facing, size)
        self.can_receive = [d != self.facing for d in Direction]
        self.can_output = [d == self.facing for d in Direction]

    def process_signal(self, signal: SignalEvent) -> list[SignalEvent]:
        self._record_input(signal)
        should_be_active = self._any_input_active()
        if should_be_active != self.activated:
            self.activated = should_be_active
            return [self._emit(self.activated)]
        return []


class JunctionTile(GridTile):
    """Takes input from behind and splits it to the other three sides."""

    name = "Junction"
    tile_id = 1
    inactive_color = GREY
    active_color = YELLOW

    def __init__(
        self,
        pos: Position = (0, 0),
        facing: Direction = Direction.TOP,
        size: Optional[float] = None,
    ) -> None:
        super().__init__(pos, facing, size)
        input_side = flip_direction(self.facing)
        self.can_output = [d != input_side for d in Direction]
        self.can_receive[input_side] = True

    def process_signal(self, signal: SignalEvent) -> list[SignalEvent]:
        if signal.is_active == self.activated:
            return []
        if not signal.is_active:
            self.activated = False
            return [
                SignalEvent(self.pos, d, False)
                for d in Direction
                if self.can_output[d]
            ]
        self.activated = True
        back = flip_direction(self.facing)
        return [
            SignalEvent(self.pos, d, True)
            for d in Direction
            if self.can_output[d] and d != back
        ]


class EmitterTile(GridTile):
    """A clocked signal source that the user can switch off and on."""

    name = "Emitter"
    tile_id = 2
    is_emitter = True
    inactive_color = DARK_CYAN
    active_color = CYAN
    EMIT_INTERVAL: ClassVar[int] = 3

    def __init__(
        self,
        pos: Position = (0, 0),
        facing: Direction = Direction.TOP,
        size: Optional[float] = None,
    ) -> None:
        super().__init__(pos, facing, size)
        self.enabled = True
        self.last_emit_tick = -self.EMIT_INTERVAL
        self.can_output[self.facing] = True
        self.can_receive = [d != self.facing for d in Direction]

    def process_signal(self, signal: SignalEvent) -> list[SignalEvent]:
        return [self._emit(self.activated)]

    def interact(self) -> list[SignalEvent]:
        self.enabled = not self.enabled
        if not self.enabled:
            self.activated = False
            return [self._emit(False)]
        return []

    def reset_activation(self) -> None:
        self.activated = self.default_activation
        self.enabled = True
        self.last_emit_tick = -self.EMIT_INTERVAL

    def should_emit(self, current_tick: int) -> bool:
        """Whether the emitter toggles on this tick."""
        return self.enabled and current_tick - self.last_emit_tick >= self.EMIT_INTERVAL


class SemiconductorTile(GridTile):
    """Conducts when its back and at least one side are both powered."""

    name = "Semiconductor"
    tile_id = 3
    inactive_color = DARK_GREEN
    active_color = GREEN

    def __init__(
        self,
        pos: Position = (0, 0),
        facing: Direction = Direction.TOP,
        size: Optional[float] = None,
    ) -> None:
        super().__init__(pos, facing, size)
        self.can_receive = [d != self.facing for d in Direction]
        self.can_output[self.facing] = True

    def process_signal(self, signal: SignalEvent) -> list[SignalEvent]:
        self._record_input(signal)
        side_active = (
            self.input_states[rotate_direction(Direction.LEFT, self.facing)]
            or self.input_states[rotate_direction(Direction.RIGHT, self.facing)]
        )
        bottom_active = self.input_states[
            rotate_direction(Direction.BOTTOM, self.facing)
        ]
        if side_active and bottom_active:
            if self.activated:
                return []
            self.activated = True
            return [self._emit(True)]
        if self.activated:
            self.activated = False
            return [self._emit(False)]
        return []

    def reset_activation(self) -> None:
        self.activated = self.default_activation

    def interact(self) -> list[SignalEvent]:
        target = next(
            d for d in Direction if rotate_direction(d, self.facing) == Direction.LEFT
        )
        self.input_states[target] = not self.input_states[target]
        return []


class ButtonTile(GridTile):
    """A switch the user toggles; it sends its state forward."""

    name = "Button"
    tile_id = 4
    inactive_color = DARK_RED
    active_color = RED

    def __init__(
        self,
        pos: Position = (0, 0),
        facing: Direction = Direction.TOP,
        size: Optional[float] = None,
    ) -> None:
        super().__init__(pos, facing, size)
        self.can_output[self.facing] = True

    def process_signal(self, signal: SignalEvent) -> list[SignalEvent]:
        return [self._emit(self.activated)]

    def interact(self) -> list[SignalEvent]:
        self.activated = not self.activated
        return [self._emit(self.activated)]


class InverterTile(GridTile):
    """Outputs the negation of whether any input is powered."""

    name = "Inverter"
    tile_id = 5
    inactive_color = DARK_MAGENTA
    active_color = MAGENTA
    default_size = 0.1

    def __init__(
        self,
        pos: Position = (0, 0),
        facing: Direction = Direction.TOP,
        size: Optional[float] = None,
    ) -> None:
        super().__init__(pos, facing, size)
        self.can_receive = [d != self.facing for d in Direction]
        self.can_output = [d == self.facing for d in Direction]

    def process_signal(self, signal: SignalEvent) -> list[SignalEvent]:
        self._record_input(signal)
        inverted = not self._any_input_active()
        if inverted != self.activated:
            self.activated = inverted
            return [self._emit(self.activated)]
        return []


_TILE_TYPES: dict[int, type[GridTile]] = {
    cls.tile_id: cls
    for cls in (
        WireTile,
        JunctionTile,
        EmitterTile,
        SemiconductorTile,
        ButtonTile,
        InverterTile,
    )
}


def deserialize(data: bytes) -> GridTile:
    """Build a tile from a record written by :meth:`GridTile.serialize`."""
    if len(data) != TILE_BYTESIZE:
        raise ValueError(
            f"Tile record must be {TILE_BYTESIZE} bytes, got {len(data)}"
        )
    tile_id, facing, x, y = _RECORD.unpack(bytes(data))
    try:
        cls = _TILE_TYPES[tile_id]
    except KeyError:
        raise ValueError("Unknown tile ID") from None
    return cls((x, y), Direction(facing))