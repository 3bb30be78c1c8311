"""Single ID3 decision tree: training, prediction, evaluation, and export."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, Self

from loguru import logger

from woodlands.dataset import (
    CategoricalValue,
    Dataset,
    Row,
    Sample,
    as_rows,
    resolve_features,
    same_value,
    validate_evaluation_rows,
    validate_training_rows,
)
from woodlands.decision_tree.induction import build_tree
from woodlands.decision_tree.information import gain
from woodlands.decision_tree.models import Branch, DecisionNode, LeafNode, TreeNode, parse_tree_node
from woodlands.exceptions import InvalidInputError


class DecisionTree:
    """An ID3 classifier over categorical attributes.

    The tree is induced once, at construction, and never changes afterwards.
    A copy of the training rows is retained for `feature_importance`.

    Values are matched with exact, type-aware equality. When a sample carries
    a value that no branch saw during training (or lacks the feature), the
    tree follows the branch whose subtree covered the most training rows.

    Attributes:
        target (str): Target attribute name.
        features (tuple[str, ...]): Candidate features supplied at training.
        data (tuple[Row, ...]): Retained copy of the training rows.
        root (TreeNode): Root node of the induced tree.

    Examples:
        >>> rows = [
        ...     {"a": 0, "b": 0, "out": 0},
        ...     {"a": 0, "b": 1, "out": 1},
        ...     {"a": 1, "b": 0, "out": 1},
        ...     {"a": 1, "b": 1, "out": 0},
        ... ]
        >>> tree = DecisionTree(rows, "out", ["a", "b"])
        >>> tree.predict({"a": 0, "b": 1})
        1
        >>> tree.evaluate(rows)
        1.0
    """

    target: str
    features: tuple[str, ...]
    data: tuple[Row, ...]
    root: TreeNode

    def __init__(self, data: Dataset, target: str, features: Iterable[str] | None = None) -> None:
        """Train a tree on `data`.

        Args:
            data (Dataset): Training rows, as a `polars.DataFrame` or an
                iterable of mappings.
            target (str): Target attribute name.
            features (Iterable[str] | None): Candidate features in tie-break
                priority order. `None` uses every non-target attribute.

        Raises:
            InvalidInputError: If the data is empty, lacks attributes, or holds
                missing, unsupported, or mixed-type values.
        """
        rows = as_rows(data)
        feature_list = resolve_features(rows, target, features)
        validate_training_rows(rows, target, feature_list)
        self._assign(build_tree(rows, target, feature_list), rows, target, feature_list)
        logger.debug(
            "Decision tree trained",
            rows=len(rows),
            features=feature_list,
            depth=self.depth,
            leaves=self.leaf_count,
        )

    @classmethod
    def from_export(
        cls,
        structure: Any,
        *,
        target: str,
        features: Iterable[str],
        data: Dataset | None = None,
    ) -> Self:
        """Re-hydrate a tree from the output of `export()`.

        Args:
            structure (Any): Nested node structure as returned by `export()`.
            target (str): Target attribute name.
            features (Iterable[str]): Feature list the tree was trained with.
            data (Dataset | None): Training rows for `feature_importance`. When
                `None`, every importance score is `0.0`.

        Returns:
            Self: A tree that predicts exactly like the exported one.

        Raises:
            pydantic.ValidationError: If `structure` is not a well-formed tree.
            InvalidInputError: If the tree splits on a feature missing from `features`.
        """
        root = parse_tree_node(structure)
        feature_list = list(features)
        unknown = sorted(_split_features(root) - set(feature_list))
        if unknown:
            raise InvalidInputError(f"Exported tree splits on features not in the feature list: {unknown}")
        rows = as_rows(data) if data is not None else []
        tree = cls.__new__(cls)
        tree._assign(root, rows, target, feature_list)
        return tree

    def _assign(self, root: TreeNode, rows: Sequence[Row], target: str, features: Sequence[str]) -> None:
        self.root = root
        self.data = tuple(rows)
        self.target = target
        self.features = tuple(features)

    def predict(self, sample: Sample) -> CategoricalValue:
        """Predict the target value of one sample.

        Args:
            sample (Sample): Mapping from feature name to value. Extra keys,
                including the target, are ignored.

        Returns:
            CategoricalValue: The value of the leaf the sample reaches.
        """
        node = self.root
        while isinstance(node, DecisionNode):
            node = _select_branch(node, sample.get(node.feature)).child
        return node.value

    def evaluate(self, data: Dataset) -> float:
        """Return the fraction of rows whose prediction equals their target value.

        Args:
            data (Dataset): Rows carrying the target attribute.

        Returns:
            float: Accuracy in `[0, 1]`; `0.0` when `data` is empty.

        Raises:
            AttributesNotFoundError: If a row lacks the target attribute.
            InvalidInputError: If a target value is missing (`None`/NaN) or of an
                unsupported type.
        """
        rows = as_rows(data)
        validate_evaluation_rows(rows, self.target)
        if not rows:
            logger.warning("Evaluating an empty dataset, returning 0.0 accuracy", target=self.target)
            return 0.0
        correct = sum(1 for row in rows if same_value(self.predict(row), row[self.target]))
        return correct / len(rows)

    def feature_importance(self) -> dict[str, float]:
        """Return the root-level information gain of every training feature.

        Each score is the gain of splitting the full retained training set on
        that feature, independent of where (or whether) the tree split on it.

        Returns:
            dict[str, float]: Feature name to gain, in feature-list order.
        """
        return {feature: gain(self.data, self.target, feature) for feature in self.features}

    def export(self) -> dict[str, Any]:
        """Return the tree as a plain nested structure.

        Returns:
            dict[str, Any]: JSON-compatible nodes. Leaves are
                `{"kind": "leaf", "value", "samples"}`; decision nodes are
                `{"kind": "decision", "feature", "samples", "branches"}` with
                `branches` a list of `{"value", "child"}`.
        """
        return self.root.model_dump(mode="json")

    @property
    def depth(self) -> int:
        """int: Number of decision nodes on the longest root-to-leaf path."""
        return _depth(self.root)

    @property
    def leaf_count(self) -> int:
        """int: Number of leaves in the tree."""
        return _leaf_count(self.root)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(target={self.target!r}, features={list(self.features)!r}, "
            f"depth={self.depth}, leaves={self.leaf_count})"
        )


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _select_branch(node: DecisionNode, value: object) -> Branch:
    for branch in node.branches:
        if same_value(branch.value, value):
            return branch
    fallback = node.majority_branch()
    logger.debug(
        "Unseen value, following majority branch",
        feature=node.feature,
        value=value,
        fallback=fallback.value,
    )
    return fallback


def _depth(node: TreeNode) -> int:
    if isinstance(node, LeafNode):
        return 0
    return 1 + max(_depth(branch.child) for branch in node.branches)


def _leaf_count(node: TreeNode) -> int:
    if isinstance(node, LeafNode):
        return 1
    return sum(_leaf_count(branch.child) for branch in node.branches)


def _split_features(node: TreeNode) -> set[str]:
    if isinstance(node, LeafNode):
        return set()
    return {node.feature}.union(*(_split_features(branch.child) for branch in node.branches))
