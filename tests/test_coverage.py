from __future__ import annotations

from covg.coverage import aggregate, percent
from covg.profile import Block, Profile


def test_aggregate_fixture(fixture_profile: Profile) -> None:
    assert aggregate(fixture_profile.blocks) == (5, 7)
    assert aggregate(fixture_profile.blocks[2:]) == (4, 5)


def test_aggregate_counts_whole_blocks() -> None:
    blocks = [Block(1, 1, 3, 1, num_stmt=4, count=7), Block(3, 1, 5, 1, num_stmt=2, count=0)]
    assert aggregate(blocks) == (4, 6)


def test_aggregate_empty() -> None:
    assert aggregate([]) == (0, 0)


def test_percent() -> None:
    assert percent(0, 0) == 100.0
    assert percent(4, 5) == 80.0
    assert f"{percent(5, 7):5.1f}" == " 71.4"
