from datetime import date
from collections import defaultdict
from dataclasses import replace
import hashlib
import json

from loguru import logger

from almanac.dates import day_of_year, is_date_in_range
from almanac.models import Segment


def split_segments(events: list, year: int, start_offset: int, columns: int) -> list[Segment]:
    """
    Clip each event to `year` and cut it at row boundaries of a grid
    `columns` wide. Events wholly outside the year produce nothing; an event
    touching several rows yields one segment per row, ascending.
    """
    year_start = date(year, 1, 1)
    year_end   = date(year, 12, 31)
    segments = []
    for event in events:
        start, end = min(event.start, event.end), max(event.start, event.end)
        if end < year_start or start > year_end:
            logger.log("LAYOUT", "Skipping '{}': outside {}", event.label, year)
            continue

        clipped_start = max(start, year_start)
        clipped_end   = min(end, year_end)
        start_day = day_of_year(clipped_start)
        end_day   = day_of_year(clipped_end)
        start_index = start_offset + start_day - 1
        end_index   = start_offset + end_day - 1

        current = start_index
        while current <= end_index:
            row = current // columns
            row_end = row * columns + (columns - 1)
            segment_end = min(end_index, row_end)
            segments.append(Segment(
                event_id=event.id,
                label=event.label,
                tone=event.tone,
                start_day=start_day,
                end_day=end_day,
                row=row + 1,
                col_start=(current % columns) + 1,
                span=segment_end - current + 1,
                created_at=event.created_at,
            ))
            current = segment_end + 1
    return segments


def stacking_order(segment: Segment) -> tuple:
    # Newest event first among segments starting in the same column
    return (segment.row, segment.col_start, -segment.created_at)


def assign_stacks(segments: list[Segment], rows: int) -> tuple[list[Segment], list[int], dict]:
    """
    Give every segment the first vertical slot in its row that is free at
    its starting column (greedy interval partitioning, left to right).
    Returns (stacked segments, slot count per row, segments grouped by row).
    """
    slot_ends = defaultdict(list)
    by_row = defaultdict(list)
    stacked = []
    for seg in sorted(segments, key=stacking_order):
        ends = slot_ends[seg.row]
        for slot, end in enumerate(ends):
            if end < seg.col_start:
                ends[slot] = seg.col_end
                break
        else:
            slot = len(ends)
            ends.append(seg.col_end)
        placed = replace(seg, stack_index=slot)
        stacked.append(placed)
        by_row[seg.row].append(placed)

    max_stack_by_row = [len(slot_ends.get(r, ())) for r in range(1, rows + 1)]

    for row, placed in by_row.items():
        logger.log("LAYOUT", "Row {}: {} segment(s) in {} slot(s)", row, len(placed), len(slot_ends[row]))
        for seg in placed:
            logger.log("LAYOUT", "  • Slot {}: {} [cols {}→{}]", seg.stack_index, seg.label, seg.col_start, seg.col_end)

    return stacked, max_stack_by_row, {row: by_row[row] for row in sorted(by_row)}


def max_overlap(segments: list[Segment]) -> int:
    """Largest number of segments sharing a single column."""
    coverage = defaultdict(int)
    for seg in segments:
        for col in range(seg.col_start, seg.col_end + 1):
            coverage[col] += 1
    return max(coverage.values(), default=0)


def events_on_day(events: list, day: date) -> list:
    """Events whose range covers `day`, the list a hover/tap preview shows."""
    return [e for e in events if is_date_in_range(day, e.start, e.end)]


def compute_events_hash(events: list) -> str:
    """
    Stable digest of the event list, independent of input order.
    """
    items = sorted(
        json.dumps(e.to_payload(), sort_keys=True, separators=(",", ":"))
        for e in events
    )
    h = hashlib.sha256()
    for item in items:
        h.update(item.encode())
    return h.hexdigest()
