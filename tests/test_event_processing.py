"""Tests for segment splitting and stacking (almanac/event_processing.py)."""

from collections import defaultdict
from datetime import date

import pytest

from almanac.event_processing import (
    assign_stacks,
    compute_events_hash,
    events_on_day,
    max_overlap,
    split_segments,
)
from almanac.grid import grid_geometry


def _segments(events, year=2026, columns=7):
    geo = grid_geometry(year, columns)
    return split_segments(events, year, geo["start_offset"], columns), geo


# Segment Splitter


def test_event_crossing_a_week_is_split(scenario_events):
    segments, _ = _segments(scenario_events[:1])
    assert [(s.row, s.col_start, s.span) for s in segments] == [(1, 5, 3), (2, 1, 7)]
    assert all(s.start_day == 1 and s.end_day == 10 for s in segments)


def test_segments_never_cross_the_row_edge(make_event):
    events = [make_event("long", "2026-02-20", "2026-05-03")]
    for columns in (7, 10, 14):
        segments, _ = _segments(events, columns=columns)
        assert all(s.col_end <= columns for s in segments)
        assert [s.row for s in segments] == sorted(s.row for s in segments)


@pytest.mark.parametrize("columns", [5, 7, 14, 28])
def test_segments_cover_the_event_exactly(make_event, columns):
    events = [make_event("trip", "2026-03-01", "2026-05-15")]
    segments, geo = _segments(events, columns=columns)
    covered = []
    for s in segments:
        first = (s.row - 1) * columns + s.col_start - 1
        covered.extend(range(first, first + s.span))
    start = geo["start_offset"] + date(2026, 3, 1).timetuple().tm_yday - 1
    end = geo["start_offset"] + date(2026, 5, 15).timetuple().tm_yday - 1
    assert covered == list(range(start, end + 1))


def test_events_are_clipped_to_the_year(make_event):
    events = [make_event("nye", "2025-12-28", "2026-01-02")]
    segments, _ = _segments(events)
    assert segments[0].row == 1
    assert segments[0].col_start == 5
    assert sum(s.span for s in segments) == 2
    assert segments[0].start_day == 1


def test_events_outside_the_year_are_skipped(make_event):
    events = [
        make_event("last-year", "2025-03-01", "2025-03-04"),
        make_event("next-year", "2027-01-01", "2027-01-01"),
    ]
    segments, _ = _segments(events)
    assert segments == []


def test_reversed_event_is_normalised(make_event):
    event = make_event("rev", "2026-06-15", "2026-06-10")
    assert (event.start, event.end) == (date(2026, 6, 10), date(2026, 6, 15))
    segments, _ = _segments([event])
    assert sum(s.span for s in segments) == 6


def test_odd_column_counts_still_split(make_event):
    segments, _ = _segments([make_event("x", "2026-01-01", "2026-01-31")], columns=10)
    assert sum(s.span for s in segments) == 31
    assert all(1 <= s.col_start <= 10 for s in segments)


# Stack Assigner


def test_overlapping_segment_goes_one_slot_down(scenario_events):
    segments, geo = _segments(scenario_events)
    stacked, max_stack_by_row, by_row = assign_stacks(segments, geo["rows"])
    row2 = {s.event_id: s.stack_index for s in by_row[2]}
    assert row2 == {"A": 0, "B": 1}
    assert max_stack_by_row[0] == 1
    assert max_stack_by_row[1] == 2
    assert all(depth == 0 for depth in max_stack_by_row[2:])
    assert len(max_stack_by_row) == geo["rows"]


def test_newest_event_wins_the_top_slot_on_ties(make_event):
    events = [
        make_event("old", "2026-03-10", "2026-03-12", created_at=100),
        make_event("new", "2026-03-10", "2026-03-11", created_at=200),
    ]
    segments, geo = _segments(events)
    stacked, _, _ = assign_stacks(segments, geo["rows"])
    slots = {s.event_id: s.stack_index for s in stacked}
    assert slots == {"new": 0, "old": 1}


def test_free_slot_is_reused(make_event):
    events = [
        make_event("mon", "2026-03-09", "2026-03-10"),
        make_event("wide", "2026-03-09", "2026-03-14"),
        make_event("thu", "2026-03-12", "2026-03-13"),
    ]
    segments, geo = _segments(events)
    stacked, max_stack_by_row, _ = assign_stacks(segments, geo["rows"])
    slots = {s.event_id: s.stack_index for s in stacked}
    assert slots["thu"] == slots["mon"]
    assert max(max_stack_by_row) == 2


def test_adjacent_segments_share_a_slot(make_event):
    events = [
        make_event("a", "2026-03-09", "2026-03-10"),
        make_event("b", "2026-03-11", "2026-03-12"),
    ]
    segments, geo = _segments(events)
    stacked, _, _ = assign_stacks(segments, geo["rows"])
    assert {s.stack_index for s in stacked} == {0}


def test_stacked_segments_are_sorted_by_row_then_column(scenario_events, make_event):
    events = scenario_events + [make_event("C", "2026-01-02", "2026-01-02")]
    segments, geo = _segments(events)
    stacked, _, _ = assign_stacks(segments, geo["rows"])
    keys = [(s.row, s.col_start) for s in stacked]
    assert keys == sorted(keys)


def _dense_events(make_event):
    spans = [
        ("2026-04-01", "2026-04-20"), ("2026-04-03", "2026-04-04"),
        ("2026-04-03", "2026-04-09"), ("2026-04-05", "2026-04-05"),
        ("2026-04-06", "2026-04-16"), ("2026-04-08", "2026-04-08"),
        ("2026-04-10", "2026-04-12"), ("2026-04-11", "2026-04-30"),
        ("2026-04-14", "2026-04-14"), ("2026-04-15", "2026-04-19"),
        ("2026-04-18", "2026-05-02"), ("2026-04-27", "2026-04-29"),
    ]
    return [
        make_event(f"e{i}", s, e, created_at=(i * 37) % 5)
        for i, (s, e) in enumerate(spans)
    ]


@pytest.mark.parametrize("columns", [7, 14])
def test_no_two_segments_in_a_slot_collide(make_event, columns):
    segments, geo = _segments(_dense_events(make_event), columns=columns)
    _, _, by_row = assign_stacks(segments, geo["rows"])
    for placed in by_row.values():
        per_slot = defaultdict(list)
        for s in placed:
            per_slot[s.stack_index].append((s.col_start, s.col_end))
        for ranges in per_slot.values():
            ranges.sort()
            for (_, prev_end), (next_start, _) in zip(ranges, ranges[1:]):
                assert prev_end < next_start


@pytest.mark.parametrize("columns", [7, 14])
def test_stack_depth_matches_max_overlap(make_event, columns):
    segments, geo = _segments(_dense_events(make_event), columns=columns)
    _, max_stack_by_row, by_row = assign_stacks(segments, geo["rows"])
    for row, placed in by_row.items():
        assert max_stack_by_row[row - 1] == max_overlap(placed)
        assert max(s.stack_index for s in placed) + 1 == max_overlap(placed)


def test_stacking_is_deterministic(make_event):
    events = _dense_events(make_event)
    segments, geo = _segments(events)
    first = assign_stacks(segments, geo["rows"])
    segments_again, _ = _segments(list(events))
    assert assign_stacks(segments_again, geo["rows"]) == first


# Helpers


def test_events_on_day(scenario_events):
    hits = events_on_day(scenario_events, date(2026, 1, 5))
    assert [e.id for e in hits] == ["A", "B"]
    assert events_on_day(scenario_events, date(2026, 1, 11)) == []


def test_events_hash_ignores_order(scenario_events, make_event):
    assert compute_events_hash(scenario_events) == compute_events_hash(scenario_events[::-1])
    changed = scenario_events + [make_event("C")]
    assert compute_events_hash(changed) != compute_events_hash(scenario_events)
