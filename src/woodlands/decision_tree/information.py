"""Entropy, information gain, best-feature selection, and majority voting."""

from __future__ import annotations

from collections import Counter
from collections.abc import Hashable, Iterable, Sequence

import numpy as np

from woodlands.dataset import CategoricalValue, Row

# Gains closer than this are treated as tied, so float noise cannot reorder candidates.
_GAIN_TOLERANCE: float = 1e-12


def entropy(values: Iterable[Hashable]) -> float:
    """Compute the Shannon entropy, in bits, of a categorical value sequence.

    Args:
        values (Iterable[Hashable]): Observed categorical values.

    Returns:
        float: `sum(-p * log2(p))` over the distinct values. `0.0` for an
            empty or single-valued sequence.

    Examples:
        >>> entropy(["yes", "no"])
        1.0
        >>> entropy([1, 1, 1])
        0.0
    """
    counts = np.fromiter(Counter(values).values(), dtype=np.float64)
    if counts.size <= 1:
        return 0.0
    probabilities = counts / counts.sum()
    return float(-np.sum(probabilities * np.log2(probabilities)))


def partition(rows: Sequence[Row], feature: str) -> dict[CategoricalValue, list[Row]]:
    """Group rows by their value of `feature`, in first-seen order.

    Args:
        rows (Sequence[Row]): Rows sharing one value type for `feature`.
        feature (str): Attribute to group by.

    Returns:
        dict[CategoricalValue, list[Row]]: Value to the rows carrying it.
    """
    subsets: dict[CategoricalValue, list[Row]] = {}
    for row in rows:
        subsets.setdefault(row[feature], []).append(row)
    return subsets


def gain(rows: Sequence[Row], target: str, feature: str) -> float:
    """Compute the information gain of splitting `rows` on `feature`.

    Args:
        rows (Sequence[Row]): Training rows.
        target (str): Target attribute name.
        feature (str): Candidate split attribute.

    Returns:
        float: Target entropy minus the size-weighted entropy of each subset.
            Never negative; `0.0` for an empty dataset.
    """
    if not rows:
        return 0.0
    total = len(rows)
    remainder = sum(
        (len(subset) / total) * entropy(row[target] for row in subset)
        for subset in partition(rows, feature).values()
    )
    return max(0.0, entropy(row[target] for row in rows) - remainder)


def best_feature(rows: Sequence[Row], target: str, features: Sequence[str]) -> str:
    """Return the candidate feature with the highest information gain.

    Ties resolve to the earliest feature in `features`.

    Args:
        rows (Sequence[Row]): Training rows.
        target (str): Target attribute name.
        features (Sequence[str]): Non-empty candidate features, in priority order.

    Returns:
        str: The selected feature name.

    Raises:
        ValueError: If `features` is empty.
    """
    if not features:
        raise ValueError("best_feature requires at least one candidate feature")
    selected = features[0]
    selected_gain = gain(rows, target, selected)
    for feature in features[1:]:
        score = gain(rows, target, feature)
        if score > selected_gain + _GAIN_TOLERANCE:
            selected, selected_gain = feature, score
    return selected


def majority_value[T: Hashable](values: Iterable[T]) -> T:
    """Return the most frequent value; ties go to the value seen first.

    Args:
        values (Iterable[T]): Non-empty sequence of votes.

    Returns:
        T: The winning value.

    Raises:
        ValueError: If `values` is empty.

    Examples:
        >>> majority_value(["b", "a", "a", "b"])
        'b'
    """
    counts = Counter(values)
    if not counts:
        raise ValueError("majority_value requires at least one value")
    return max(counts, key=counts.__getitem__)
