"""Recursive ID3 induction."""

from __future__ import annotations

from collections.abc import Sequence

from woodlands.dataset import Row
from woodlands.decision_tree.information import best_feature, majority_value, partition
from woodlands.decision_tree.models import Branch, DecisionNode, LeafNode, TreeNode
from woodlands.exceptions import EmptyDatasetError


def build_tree(rows: Sequence[Row], target: str, features: Sequence[str]) -> TreeNode:
    """Induce an ID3 tree from `rows`.

    The split feature at each node is the one with the highest information
    gain; it is removed from the candidates of every child, so no feature
    repeats along a root-to-leaf path and depth never exceeds `len(features)`.
    Nodes where no remaining feature takes more than one value become leaves
    holding the majority target value.

    Args:
        rows (Sequence[Row]): Non-empty, validated training rows.
        target (str): Target attribute name.
        features (Sequence[str]): Candidate features, in tie-break priority order.

    Returns:
        TreeNode: The root of the induced tree.

    Raises:
        EmptyDatasetError: If `rows` is empty.
    """
    if not rows:
        raise EmptyDatasetError()
    targets = [row[target] for row in rows]
    if len(set(targets)) == 1:
        return LeafNode(value=targets[0], samples=len(rows))
    # A feature that is constant over these rows cannot separate them.
    candidates = [feature for feature in features if len({row[feature] for row in rows}) > 1]
    if not candidates:
        return LeafNode(value=majority_value(targets), samples=len(rows))

    feature = best_feature(rows, target, candidates)
    subsets = partition(rows, feature)
    remaining = [candidate for candidate in features if candidate != feature]
    branches = tuple(
        Branch(value=value, child=build_tree(subset, target, remaining)) for value, subset in subsets.items()
    )
    return DecisionNode(feature=feature, samples=len(rows), branches=branches)
