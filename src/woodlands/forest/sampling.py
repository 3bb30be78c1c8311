"""Per-member row and feature subsampling for random forests.

Rows and features are drawn *without* replacement: each member sees a
shuffled prefix of the training set, not a bootstrap resample.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import NamedTuple

import numpy as np
from sklearn.utils import check_random_state

from woodlands.dataset import Row

_MAX_SEED: int = np.iinfo(np.int32).max


class MemberSample(NamedTuple):
    """Training subset drawn for one forest member.

    Attributes:
        rows (list[Row]): Sampled rows, in original dataset order.
        features (list[str]): Sampled features, in original feature-list order.
    """

    rows: list[Row]
    features: list[str]


def sample_size(total: int, fraction: float) -> int:
    """Return how many of `total` items a member draws.

    Rounds half up and never returns fewer than one item for a non-empty pool.

    Args:
        total (int): Pool size.
        fraction (float): Fraction of the pool to draw.

    Returns:
        int: `max(1, floor(total * fraction + 0.5))`, capped at `total`;
            `0` when `total` is `0`.

    Examples:
        >>> sample_size(10, 0.25)
        3
        >>> sample_size(3, 0.1)
        1
    """
    if total == 0:
        return 0
    return min(total, max(1, math.floor(total * fraction + 0.5)))


def spawn_member_seeds(random_state: int | np.random.RandomState | None, count: int) -> list[int]:
    """Draw one independent seed per forest member.

    Seeds are drawn up front so each member owns its generator and the
    forest's composition does not depend on how members are scheduled.

    Args:
        random_state (int | np.random.RandomState | None): Seed or generator
            for the whole forest; `None` uses numpy's global generator.
        count (int): Number of members.

    Returns:
        list[int]: `count` seeds.
    """
    generator = check_random_state(random_state)
    return [int(seed) for seed in generator.randint(_MAX_SEED, size=count)]


def draw_member_sample(
    rows: Sequence[Row],
    features: Sequence[str],
    *,
    row_fraction: float,
    feature_fraction: float,
    random_state: int | np.random.RandomState | None,
) -> MemberSample:
    """Draw a row subset and a feature subset for one forest member.

    Both pools are shuffled and a prefix of the shuffled order is kept; the
    kept items are then restored to their original order so downstream
    tie-breaks follow the caller's ordering.

    Args:
        rows (Sequence[Row]): Full training rows.
        features (Sequence[str]): Full feature list.
        row_fraction (float): Fraction of rows to keep.
        feature_fraction (float): Fraction of features to keep.
        random_state (int | np.random.RandomState | None): Member seed or generator.

    Returns:
        MemberSample: The sampled rows and features.
    """
    generator = check_random_state(random_state)
    row_indices = np.sort(generator.permutation(len(rows))[: sample_size(len(rows), row_fraction)])
    feature_indices = np.sort(generator.permutation(len(features))[: sample_size(len(features), feature_fraction)])
    return MemberSample(
        rows=[rows[index] for index in row_indices],
        features=[features[index] for index in feature_indices],
    )
