import pytest
from hypothesis import given, strategies as st

from neurokv.raft_log import (
    AppendOutcome,
    Entry,
    IndexOutOfBoundsError,
    Log,
    LogError,
)


def test_default_log_has_sentinel():
    log = Log(0)
    assert len(log.entries) == 1
    assert log.entries[0].term == 0
    assert log.entries[0].command == 0


def test_at_valid_index():
    log = Log(0)
    entry = log.at(0)
    assert entry.term == 0
    assert entry.command == 0


def test_at_index_out_of_bounds():
    log = Log(0)
    with pytest.raises(IndexOutOfBoundsError) as info:
        log.at(1)
    assert info.value.index == 1
    assert str(info.value) == "index 1 out of bounds"


def test_at_negative_index_is_log_error():
    log = Log(0)
    with pytest.raises(LogError):
        log.at(-1)


def test_append_entries_to_empty_log():
    log = Log(0)
    entries = [Entry(command=1, term=1), Entry(command=2, term=1)]
    result = log.append_entries(0, 0, entries)
    assert result is AppendOutcome.SUCCESS
    assert len(log.entries) == 3
    assert log.at(1).command == 1
    assert log.at(2).command == 2


def test_append_entries_idempotent():
    log = Log(0)
    entries = [Entry(command=1, term=1), Entry(command=2, term=1)]
    log.append_entries(0, 0, list(entries))
    result = log.append_entries(0, 0, entries)
    assert result is AppendOutcome.SUCCESS
    assert len(log.entries) == 3


def test_append_entries_conflict_wrong_prev_index():
    log = Log(0)
    assert log.append_entries(5, 1, []) is AppendOutcome.CONFLICT


def test_append_entries_conflict_wrong_prev_term():
    log = Log(0)
    log.entries.append(Entry(command=1, term=1))
    assert log.append_entries(1, 2, []) is AppendOutcome.CONFLICT


def test_append_truncates_conflicting_entries():
    log = Log(0)
    log.entries.append(Entry(command=1, term=1))
    log.entries.append(Entry(command=2, term=1))
    log.entries.append(Entry(command=3, term=1))
    new_entries = [Entry(command=2, term=3), Entry(command=3, term=3)]
    result = log.append_entries(1, 1, new_entries)
    assert result is AppendOutcome.SUCCESS
    assert len(log.entries) == 4
    assert log.at(2).command == 2
    assert log.at(2).term == 3


def test_conflict_leaves_log_unchanged():
    log = Log(0)
    log.entries.append(Entry(command=1, term=1))
    before = list(log.entries)
    log.append_entries(1, 7, [Entry(command=9, term=7)])
    assert log.entries == before


def test_len_matches_entries():
    log = Log("noop")
    log.append_entries(0, 0, [Entry(command="a", term=1)])
    assert len(log) == len(log.entries)
    assert [e.command for e in log] == ["noop", "a"]


entry_lists = st.lists(
    st.builds(Entry, command=st.integers(), term=st.integers(min_value=0, max_value=5)),
    max_size=20,
)


@given(entry_lists)
def test_append_then_reappend_is_stable(entries):
    log = Log(0)
    assert log.append_entries(0, 0, entries) is AppendOutcome.SUCCESS
    snapshot = list(log.entries)
    assert log.append_entries(0, 0, entries) is AppendOutcome.SUCCESS
    assert log.entries == snapshot
    assert log.entries[1:] == entries


@given(entry_lists, entry_lists)
def test_append_after_sentinel_replaces_suffix(first, second):
    log = Log(0)
    log.append_entries(0, 0, first)
    log.append_entries(0, 0, second)
    assert log.entries[1 : 1 + len(second)] == second