"""Random forest of ID3 trees built from row and feature subsamples."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from typing import Literal, overload

import numpy as np
from joblib import Parallel, delayed
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from woodlands.dataset import (
    CategoricalValue,
    Dataset,
    Row,
    Sample,
    as_rows,
    resolve_features,
    validate_evaluation_rows,
    validate_training_rows,
)
from woodlands.decision_tree.information import gain, majority_value
from woodlands.decision_tree.tree import DecisionTree
from woodlands.forest.evaluation import EvaluationReport, build_report
from woodlands.forest.sampling import draw_member_sample, sample_size, spawn_member_seeds

type PredictionKind = Literal["class", "probability"]


class ForestConfig(BaseModel):
    """Ensemble configuration for `RandomForest`.

    Attributes:
        tree_count (int): Number of member trees.
        row_fraction (float): Fraction of training rows each member sees,
            drawn without replacement.
        feature_fraction (float): Fraction of features each member may split on.
        n_jobs (int | None): joblib worker count for building members. `None`
            builds sequentially unless an enclosing `joblib.parallel_config`
            says otherwise; `-1` uses every core.

    Examples:
        >>> ForestConfig(tree_count=10).row_fraction
        0.2
    """

    model_config = ConfigDict(frozen=True)

    tree_count: int = Field(default=100, ge=1, description="Number of member trees.")
    row_fraction: float = Field(
        default=0.2,
        gt=0.0,
        le=1.0,
        description="Fraction of training rows each member sees, drawn without replacement.",
    )
    feature_fraction: float = Field(
        default=0.7,
        gt=0.0,
        le=1.0,
        description="Fraction of features each member may split on.",
    )
    n_jobs: int | None = Field(
        default=None,
        description="joblib worker count used to build member trees.",
    )


class RandomForest:
    """An ensemble of ID3 trees voting on the target class.

    Each member is trained on its own subsample of rows and features. Members
    are independent, so they are built as separate joblib tasks (threads) that
    only read the shared training data; each task owns a generator seeded
    from `random_state`, so results are identical for any `n_jobs`.

    Attributes:
        target (str): Target attribute name.
        features (tuple[str, ...]): Full feature list.
        data (tuple[Row, ...]): Retained copy of the full training rows.
        config (ForestConfig): Ensemble configuration.
        trees (tuple[DecisionTree, ...]): Member trees, in construction order.

    Examples:
        >>> rows = [
        ...     {"a": 0, "b": 0, "out": 0},
        ...     {"a": 0, "b": 1, "out": 1},
        ...     {"a": 1, "b": 0, "out": 1},
        ...     {"a": 1, "b": 1, "out": 0},
        ... ]
        >>> config = ForestConfig(tree_count=5, row_fraction=1.0, feature_fraction=1.0)
        >>> forest = RandomForest(rows, "out", ["a", "b"], config, random_state=0)
        >>> forest.predict_probability({"a": 0, "b": 1})
        {1: 1.0}
    """

    target: str
    features: tuple[str, ...]
    data: tuple[Row, ...]
    config: ForestConfig
    trees: tuple[DecisionTree, ...]

    def __init__(
        self,
        data: Dataset,
        target: str,
        features: Iterable[str] | None = None,
        config: ForestConfig | None = None,
        *,
        random_state: int | np.random.RandomState | None = None,
    ) -> None:
        """Train `config.tree_count` member trees.

        Args:
            data (Dataset): Training rows, as a `polars.DataFrame` or an
                iterable of mappings.
            target (str): Target attribute name.
            features (Iterable[str] | None): Candidate features. `None` uses
                every non-target attribute.
            config (ForestConfig | None): Ensemble configuration; defaults to
                `ForestConfig()`.
            random_state (int | np.random.RandomState | None): Seed or
                generator for member sampling. `None` is non-deterministic.

        Raises:
            InvalidInputError: If the training data is rejected; raised before
                any member is built.
        """
        rows = as_rows(data)
        feature_list = resolve_features(rows, target, features)
        validate_training_rows(rows, target, feature_list)

        self.target = target
        self.features = tuple(feature_list)
        self.data = tuple(rows)
        self.config = config if config is not None else ForestConfig()

        seeds = spawn_member_seeds(random_state, self.config.tree_count)
        self.trees = tuple(
            Parallel(n_jobs=self.config.n_jobs, prefer="threads")(
                delayed(self._grow_member)(index, seed) for index, seed in enumerate(seeds)
            )
        )
        logger.info(
            "Random forest trained",
            trees=len(self.trees),
            rows_per_tree=sample_size(len(self.data), self.config.row_fraction),
            features_per_tree=sample_size(len(self.features), self.config.feature_fraction),
        )

    def _grow_member(self, index: int, seed: int) -> DecisionTree:
        member = draw_member_sample(
            self.data,
            self.features,
            row_fraction=self.config.row_fraction,
            feature_fraction=self.config.feature_fraction,
            random_state=seed,
        )
        logger.debug("Member tree sampled", index=index, rows=len(member.rows), features=member.features)
        return DecisionTree(member.rows, self.target, member.features)

    @overload
    def predict(self, sample: Sample, kind: Literal["class"] = ...) -> CategoricalValue: ...

    @overload
    def predict(self, sample: Sample, kind: Literal["probability"]) -> dict[CategoricalValue, float]: ...

    def predict(
        self,
        sample: Sample,
        kind: PredictionKind = "class",
    ) -> CategoricalValue | dict[CategoricalValue, float]:
        """Predict a class or a class distribution for one sample.

        Args:
            sample (Sample): Mapping from feature name to value.
            kind (PredictionKind): `"class"` for the majority vote,
                `"probability"` for vote fractions.

        Returns:
            CategoricalValue | dict[CategoricalValue, float]: See
                `predict_class` and `predict_probability`.

        Raises:
            ValueError: If `kind` is not recognized.
        """
        if kind == "class":
            return self.predict_class(sample)
        if kind == "probability":
            return self.predict_probability(sample)
        raise ValueError(f"Unexpected prediction kind: {kind!r}")

    def predict_class(self, sample: Sample) -> CategoricalValue:
        """Return the class most member trees predict.

        Ties go to the class voted first, in member order.

        Args:
            sample (Sample): Mapping from feature name to value.

        Returns:
            CategoricalValue: The winning class value.
        """
        return majority_value(self._votes(sample))

    def predict_probability(self, sample: Sample) -> dict[CategoricalValue, float]:
        """Return the fraction of member trees voting for each predicted class.

        Args:
            sample (Sample): Mapping from feature name to value.

        Returns:
            dict[CategoricalValue, float]: Class value to vote share, in
                first-voted order. Shares sum to 1.0; classes no member
                predicted are absent.
        """
        votes = self._votes(sample)
        return {label: count / len(votes) for label, count in Counter(votes).items()}

    def evaluate(self, data: Dataset) -> EvaluationReport:
        """Score the forest's class predictions against `data`.

        Args:
            data (Dataset): Rows carrying the target attribute.

        Returns:
            EvaluationReport: Per-class and macro-averaged metrics, accuracy,
                and the forest's feature importance. An empty dataset yields
                zero counts, `0.0` metrics, and no classes.

        Raises:
            AttributesNotFoundError: If a row lacks the target attribute.
            InvalidInputError: If a target value is missing (`None`/NaN) or of an
                unsupported type.
        """
        rows = as_rows(data)
        validate_evaluation_rows(rows, self.target)
        if not rows:
            logger.warning("Evaluating an empty dataset, returning 0.0 metrics", target=self.target)
        return build_report(
            [row[self.target] for row in rows],
            [self.predict_class(row) for row in rows],
            feature_importance=self.feature_importance(),
        )

    def feature_importance(self) -> dict[str, float]:
        """Return the root-level information gain of every feature over the full training set.

        Returns:
            dict[str, float]: Feature name to gain, in feature-list order.
        """
        return {feature: gain(self.data, self.target, feature) for feature in self.features}

    def _votes(self, sample: Sample) -> Sequence[CategoricalValue]:
        return [tree.predict(sample) for tree in self.trees]

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(target={self.target!r}, features={list(self.features)!r}, "
            f"trees={len(self.trees)})"
        )
