"""
Day-grid geometry for the week calendar.

A day column is ``hours`` slots of ``slot_height`` units each.  Every
appointment becomes a :class:`Block` with a vertical offset and a
height proportional to its duration.  Blocks are laid out
independently: concurrent appointments overlap unless the caller runs
:func:`assign_columns` on the result.
"""
from __future__ import annotations

import zlib
from dataclasses import dataclass, replace
from datetime import date, datetime, tzinfo
from typing import Iterable, Optional, Sequence

from care.services.datetimes import session_tz

DEFAULT_PALETTE = ('corp-fi', 'ent-law', 'writing', 'securities')


@dataclass(frozen=True)
class GridConfig:
    slot_height: float = 100
    start_hour: float = 0
    hours: int = 24
    min_height: float = 60
    condensed_threshold: float = 70
    palette: Sequence[str] = DEFAULT_PALETTE


DEFAULT_GRID = GridConfig()


@dataclass(frozen=True)
class Block:
    appointment_id: str
    title: str
    top: float
    height: float
    display_height: float
    condensed: bool
    color_index: int
    color: str
    # filled in by assign_columns
    column: int = 0
    columns: int = 1

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def show_notes(self) -> bool:
        return not self.condensed


def minute_of_day(dt: datetime) -> int:
    return dt.hour * 60 + dt.minute


def color_index(appointment_id: str, size: int) -> int:
    """Stable palette slot for an appointment id.

    Numeric ids use their value; hex ids (UUIDs) their base-16 value;
    anything else a CRC32 of the text.
    """
    if size <= 0:
        raise ValueError("palette must not be empty")
    text = str(appointment_id).strip()
    if text.isdigit():
        value = int(text)
    else:
        try:
            value = int(text, 16)
        except ValueError:
            value = zlib.crc32(text.encode('utf-8'))
    return value % size


def layout_block(appt, day: date, config: GridConfig = DEFAULT_GRID,
                 tz: Optional[tzinfo] = None) -> Block:
    tz = session_tz(tz)
    start = appt.start.astimezone(tz)
    end = appt.end.astimezone(tz)

    start_min = minute_of_day(start) if start.date() == day else 0
    # Ends after this day are cut at midnight
    end_min = minute_of_day(end) if end.date() == day else config.hours * 60

    # whole-minute durations yield exact heights
    top = (start_min - config.start_hour * 60) * config.slot_height / 60
    height = (end_min - start_min) * config.slot_height / 60
    idx = color_index(appt.id, len(config.palette))
    return Block(
        appointment_id=appt.id,
        title=appt.title,
        top=top,
        height=height,
        display_height=max(height, config.min_height),
        condensed=height < config.condensed_threshold,
        color_index=idx,
        color=config.palette[idx],
    )


def layout_day(appointments: Iterable, day: date, config: GridConfig = DEFAULT_GRID,
               tz: Optional[tzinfo] = None) -> list[Block]:
    return [layout_block(a, day, config, tz) for a in appointments]


def assign_columns(blocks: Sequence[Block]) -> list[Block]:
    """Greedy interval partitioning of overlapping blocks.

    Blocks are visited by ``top`` (longer first on ties) and put in the
    lowest column whose previous block has ended.  Every block in a
    cluster of mutually reachable overlaps gets the cluster's column
    count.  The input order is preserved in the result.
    """
    order = sorted(range(len(blocks)), key=lambda i: (blocks[i].top, -blocks[i].height))
    column_of: dict[int, int] = {}
    cluster_of: dict[int, int] = {}
    cluster_width: list[int] = []

    column_ends: list[float] = []
    cluster_end = float('-inf')
    for i in order:
        b = blocks[i]
        if b.top >= cluster_end:
            # nothing running: start a new cluster
            cluster_width.append(0)
            column_ends = []
        cluster = len(cluster_width) - 1

        for col, end in enumerate(column_ends):
            if end <= b.top:
                column_ends[col] = b.bottom
                break
        else:
            col = len(column_ends)
            column_ends.append(b.bottom)

        column_of[i] = col
        cluster_of[i] = cluster
        cluster_width[cluster] = max(cluster_width[cluster], col + 1)
        cluster_end = max(cluster_end, b.bottom) if b.top < cluster_end else b.bottom

    return [
        replace(b, column=column_of[i], columns=cluster_width[cluster_of[i]])
        for i, b in enumerate(blocks)
    ]
