import pytest

from ascend.core.rotation import resolve_group, resolve_rfem


def test_group_rotation_wraps_across_weeks():
    rotation = ["A", "B"]
    # Three workouts a week: week 2 starts on B because the index is absolute
    assert [resolve_group(rotation, i) for i in range(6)] == ["A", "B", "A", "B", "A", "B"]
    assert resolve_group(rotation, 3) == "B"


def test_rfem_rotation_longer_than_group_rotation():
    rfem = [4, 3, 2]
    assert [resolve_rfem(rfem, i) for i in range(7)] == [4, 3, 2, 4, 3, 2, 4]


def test_single_entry_rotation_repeats():
    assert resolve_group(["only"], 41) == "only"


def test_empty_rotation_raises():
    with pytest.raises(ValueError):
        resolve_group([], 0)
    with pytest.raises(ValueError):
        resolve_rfem([], 5)


def test_negative_index_raises():
    with pytest.raises(ValueError):
        resolve_group(["A"], -1)
