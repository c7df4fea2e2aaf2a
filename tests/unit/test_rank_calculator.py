"""Unit tests for level computation over a fake downline."""

from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.config.business_constants import level_to_rank
from app.services.referral.rank_calculator import RankCalculator


THRESHOLD = Decimal("50")


class TreeCalculator(RankCalculator):
    """RankCalculator reading active children from an in-memory tree."""

    def __init__(self, tree):
        self.tree = tree
        self.threshold = THRESHOLD
        self.layer_queries = 0

    async def _active_children(self, parent_ids):
        self.layer_queries += 1
        return {pid: list(self.tree.get(pid, [])) for pid in parent_ids}


def subject(user_id=1, balance="100"):
    user = SimpleNamespace(id=user_id, balance=Decimal(balance))
    user.is_active = lambda threshold: user.balance >= threshold
    return user


def full_tree(depth, fanout=3):
    """Complete tree rooted at 1, every node with `fanout` active children."""
    tree = {}
    next_id = 2
    layer = [1]
    for _ in range(depth):
        new_layer = []
        for node in layer:
            kids = list(range(next_id, next_id + fanout))
            next_id += fanout
            tree[node] = kids
            new_layer.extend(kids)
        layer = new_layer
    return tree


@pytest.mark.asyncio
@pytest.mark.parametrize("depth,expected", [(0, 0), (1, 1), (2, 2), (3, 3)])
async def test_full_tree_levels(depth, expected):
    calculator = TreeCalculator(full_tree(depth))

    assert await calculator.compute_level(subject()) == expected


@pytest.mark.asyncio
async def test_two_children_is_not_enough():
    calculator = TreeCalculator({1: [2, 3]})

    assert await calculator.compute_level(subject()) == 0


@pytest.mark.asyncio
async def test_inactive_subject_is_level_zero():
    calculator = TreeCalculator(full_tree(2))

    assert await calculator.compute_level(subject(balance="49.99")) == 0
    assert calculator.layer_queries == 0


@pytest.mark.asyncio
async def test_weakest_of_directs_decides():
    tree = full_tree(2)
    # Strip one grandchild layer under the first direct
    tree[2] = tree[2][:2]

    calculator = TreeCalculator(tree)

    assert await calculator.compute_level(subject()) == 1


@pytest.mark.asyncio
async def test_extra_weak_direct_does_not_hold_back():
    tree = full_tree(2)
    tree[1] = tree[1] + [99]

    calculator = TreeCalculator(tree)

    # 99 has no children (level 0): min over all active directs is 0
    assert await calculator.compute_level(subject()) == 1


@pytest.mark.asyncio
async def test_walk_stops_after_ten_layers():
    tree = {node: [node + 1] for node in range(1, 30)}
    calculator = TreeCalculator(tree)

    assert await calculator.compute_level(subject()) == 0
    assert calculator.layer_queries == 10


@pytest.mark.asyncio
async def test_cycle_is_ignored():
    tree = {1: [2, 3, 4], 2: [1]}
    calculator = TreeCalculator(tree)

    assert await calculator.compute_level(subject()) == 1


@pytest.mark.parametrize(
    "level,rank",
    [(0, "Starter"), (1, "Bronze"), (5, "Sapphire"), (10, "Legender"), (11, "Starter")],
)
def test_level_to_rank(level, rank):
    assert level_to_rank(level) == rank
