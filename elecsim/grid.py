"""The tile grid: placement, signal propagation, view transforms and files."""

from __future__ import annotations

import heapq
import itertools
import logging
import math
import weakref
from collections.abc import Iterator
from typing import Optional

from elecsim.tiles import (
    TILE_BYTESIZE,
    Direction,
    EmitterTile,
    GridTile,
    SignalEvent,
    UpdateEvent,
    deserialize,
    flip_direction,
)

logger = logging.getLogger(__name__)

Position = tuple[int, int]
Vector = tuple[float, float]

_OFFSETS: dict[Direction, Position] = {
    Direction.TOP: (0, -1),
    Direction.RIGHT: (1, 0),
    Direction.BOTTOM: (0, 1),
    Direction.LEFT: (-1, 0),
}


def _key(pos) -> Position:
    return (int(pos[0]), int(pos[1]))


def _translate(pos: Position, direction: Direction) -> Position:
    dx, dy = _OFFSETS[direction]
    return (pos[0] + dx, pos[1] + dy)


class Grid:
    """A sparse field of tiles with a priority queue of pending signals."""

    def __init__(
        self,
        size=(0, 0),
        render_scale: float = 32.0,
        render_offset=(0.0, 0.0),
    ) -> None:
        self.render_window: Position = _key(size)
        self.render_scale = float(render_scale)
        self.render_offset: Vector = (float(render_offset[0]), float(render_offset[1]))
        self.current_tick = 0
        self._tiles: dict[Position, GridTile] = {}
        self._emitters: list[weakref.ref[GridTile]] = []
        self._queue: list[tuple[int, int, UpdateEvent]] = []
        self._sequence = itertools.count()
        logger.debug(
            "Grid initialized with size %sx%s, render scale %s, render offset %s",
            self.render_window[0],
            self.render_window[1],
            self.render_scale,
            self.render_offset,
        )

    # --- tile access -------------------------------------------------------

    def _ordered(self) -> list[tuple[Position, GridTile]]:
        return sorted(self._tiles.items(), key=lambda item: (item[0][1], item[0][0]))

    def __len__(self) -> int:
        return len(self._tiles)

    def __iter__(self) -> Iterator[GridTile]:
        """Iterate over tiles row by row, left to right."""
        return (tile for _, tile in self._ordered())

    def __contains__(self, pos) -> bool:
        return _key(pos) in self._tiles

    def get(self, pos) -> Optional[GridTile]:
        """Return the tile at ``pos``, or ``None``."""
        return self._tiles.get(_key(pos))

    def set_tile(self, pos, tile: GridTile, emitter: bool = False) -> None:
        """Place ``tile`` at ``pos``; emitters are also clocked by :meth:`simulate`."""
        key = _key(pos)
        self._tiles[key] = tile
        if emitter:
            self._emitters.append(weakref.ref(tile))

    def erase_tile(self, pos) -> None:
        """Remove the tile at ``pos`` if there is one."""
        self._tiles.pop(_key(pos), None)

    def resize(self, size) -> None:
        self.render_window = _key(size)

    def clear(self) -> None:
        """Remove every tile and reset the simulation."""
        self._tiles.clear()
        self._emitters.clear()
        self.reset_simulation()

    # --- simulation --------------------------------------------------------

    def queue_update(
        self, tile: Optional[GridTile], event: SignalEvent, priority: int = 0
    ) -> None:
        """Schedule ``event``; higher priorities are processed first."""
        update = UpdateEvent(tile, event, priority)
        heapq.heappush(self._queue, (-priority, next(self._sequence), update))

    def _process_signal_event(self, event: SignalEvent) -> None:
        tile = self._tiles.get(event.source_pos)
        if tile is None:
            return
        for signal in tile.process_signal(event):
            target_pos = _translate(
                signal.source_pos, flip_direction(signal.from_direction)
            )
            target = self._tiles.get(target_pos)
            if target is None:
                continue
            if target.can_receive_from(signal.from_direction):
                self.queue_update(
                    target,
                    SignalEvent(target_pos, signal.from_direction, signal.is_active),
                )

    def simulate(self) -> int:
        """Advance one tick and drain the queue; return the updates processed."""
        self.current_tick += 1

        alive: list[weakref.ref[GridTile]] = []
        for ref in self._emitters:
            tile = ref()
            if tile is None:
                continue
            alive.append(ref)
            if isinstance(tile, EmitterTile) and tile.should_emit(self.current_tick):
                tile.activated = not tile.activated
                self.queue_update(
                    tile, SignalEvent(tile.pos, tile.facing, tile.activated), 1
                )
        self._emitters = alive

        processed = 0
        while self._queue:
            _, _, update = heapq.heappop(self._queue)
            if update.tile is None:
                continue
            self._process_signal_event(update.event)
            processed += 1
        return processed

    def reset_simulation(self) -> None:
        """Drop pending updates, reset every tile and queue 'off' on all inputs."""
        self._queue.clear()
        self.current_tick = 0
        for pos, tile in self._ordered():
            tile.reset_activation()
            for direction in Direction:
                if tile.can_receive_from(direction):
                    self.queue_update(tile, SignalEvent(pos, direction, False), 100)

    # --- view transforms ---------------------------------------------------

    def world_to_screen_floating(self, pos) -> Vector:
        ox, oy = self.render_offset
        return (pos[0] * self.render_scale + ox, pos[1] * self.render_scale + oy)

    def world_to_screen(self, pos) -> Position:
        x, y = self.world_to_screen_floating(pos)
        return (math.floor(x), math.floor(y))

    def screen_to_world(self, pos) -> Vector:
        ox, oy = self.render_offset
        return ((pos[0] - ox) / self.render_scale, (pos[1] - oy) / self.render_scale)

    @staticmethod
    def align_to_grid(pos) -> Vector:
        return (float(math.floor(pos[0])), float(math.floor(pos[1])))

    @staticmethod
    def center_of_square(pos) -> Vector:
        return (math.floor(pos[0]) + 0.5, math.floor(pos[1]) + 0.5)

    # --- files -------------------------------------------------------------

    def save(self, path) -> None:
        """Write every tile as a fixed-size record."""
        with open(path, "wb") as fh:
            for _, tile in self._ordered():
                fh.write(tile.serialize())
        logger.info("Saved grid to %s (%d tiles)", path, len(self._tiles))

    def load(self, path) -> None:
        """Replace the grid's contents with the tiles stored in ``path``."""
        with open(path, "rb") as fh:
            data = fh.read()
        tiles = [
            deserialize(data[start : start + TILE_BYTESIZE])
            for start in range(0, len(data), TILE_BYTESIZE)
        ]
        self.clear()
        for tile in tiles:
            self._tiles[tile.pos] = tile
            if tile.is_emitter:
                self._emitters.append(weakref.ref(tile))
        logger.info("Loaded grid from %s (%d tiles)", path, len(self._tiles))
        self.reset_simulation()