"""Tests for random picking helpers."""

import random

from quote_memory.utils.sampling import random_item, random_items


class TestRandomItems:
    def test_does_not_mutate_input(self):
        items = [1, 2, 3, 4, 5]
        selected, remaining = random_items(items, 3, random.Random(0))
        assert items == [1, 2, 3, 4, 5]
        assert len(selected) == 3
        assert sorted(selected + remaining) == items

    def test_limit_larger_than_input(self):
        selected, remaining = random_items(["a", "b", "c"], 10, random.Random(0))
        assert sorted(selected) == ["a", "b", "c"]
        assert remaining == []

    def test_no_repeats(self):
        selected, _ = random_items(list(range(50)), 20, random.Random(7))
        assert len(set(selected)) == 20

    def test_deterministic_under_seed(self):
        a, _ = random_items(list(range(10)), 4, random.Random(42))
        b, _ = random_items(list(range(10)), 4, random.Random(42))
        assert a == b


class TestRandomItem:
    def test_picks_member(self):
        assert random_item(["x", "y"], random.Random(3)) in {"x", "y"}
