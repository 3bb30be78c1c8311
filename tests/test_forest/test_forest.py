"""Tests for RandomForest: construction, voting, probabilities, and evaluation."""

from __future__ import annotations

import polars as pl
import pytest
from pydantic import ValidationError
from pytest_check import check

from woodlands.decision_tree.information import gain
from woodlands.decision_tree.tree import DecisionTree
from woodlands.exceptions import AttributesNotFoundError, EmptyDatasetError, InvalidInputError
from woodlands.forest.forest import ForestConfig, RandomForest

_FULL_SAMPLE = ForestConfig(tree_count=50, row_fraction=1.0, feature_fraction=1.0)


class TestForestConfig:
    """Tests for the ForestConfig model."""

    def test_defaults(self) -> None:
        """Defaults are 100 trees, 20% of rows, and 70% of features, built sequentially."""
        config = ForestConfig()
        with check:
            assert config.tree_count == 100
        with check:
            assert config.row_fraction == 0.2
        with check:
            assert config.feature_fraction == 0.7
        with check:
            assert config.n_jobs is None

    @pytest.mark.parametrize(
        "overrides",
        [
            {"tree_count": 0},
            {"row_fraction": 0.0},
            {"row_fraction": 1.5},
            {"feature_fraction": -0.1},
        ],
    )
    def test_out_of_range_values_rejected(self, overrides: dict[str, float]) -> None:
        """Non-positive tree counts and fractions outside (0, 1] are invalid."""
        with pytest.raises(ValidationError):
            ForestConfig(**overrides)


class TestConstruction:
    """Tests for RandomForest training."""

    def test_builds_requested_number_of_trees(self) -> None:
        """The forest holds exactly `tree_count` members."""
        forest = RandomForest(_xor_rows(), "out", ["a", "b"], _FULL_SAMPLE, random_state=0)
        assert len(forest.trees) == 50

    def test_members_use_sampled_sizes(self) -> None:
        """Each member sees the configured share of rows and features."""
        # Arrange
        config = ForestConfig(tree_count=8, row_fraction=0.5, feature_fraction=0.7)

        # Act
        forest = RandomForest(_play_tennis_rows(), "play", _PLAY_TENNIS_FEATURES, config, random_state=1)

        # Assert
        with check:
            assert all(len(tree.data) == 7 for tree in forest.trees)
        with check:
            assert all(len(tree.features) == 3 for tree in forest.trees)
        with check:
            assert all(set(tree.features) <= set(_PLAY_TENNIS_FEATURES) for tree in forest.trees)

    def test_same_random_state_builds_same_forest(self) -> None:
        """Member composition is reproducible from the injected seed."""
        # Arrange
        config = ForestConfig(tree_count=10, row_fraction=0.5, feature_fraction=0.5)

        # Act
        first = RandomForest(_play_tennis_rows(), "play", _PLAY_TENNIS_FEATURES, config, random_state=7)
        second = RandomForest(_play_tennis_rows(), "play", _PLAY_TENNIS_FEATURES, config, random_state=7)

        # Assert
        assert [tree.export() for tree in first.trees] == [tree.export() for tree in second.trees]

    def test_parallel_build_matches_sequential(self) -> None:
        """Building members on several workers gives the same trees in the same order."""
        # Arrange
        sequential = ForestConfig(tree_count=12, row_fraction=0.5, feature_fraction=0.5)
        parallel = ForestConfig(tree_count=12, row_fraction=0.5, feature_fraction=0.5, n_jobs=2)

        # Act
        first = RandomForest(_play_tennis_rows(), "play", _PLAY_TENNIS_FEATURES, sequential, random_state=3)
        second = RandomForest(_play_tennis_rows(), "play", _PLAY_TENNIS_FEATURES, parallel, random_state=3)

        # Assert
        with check:
            assert [tree.export() for tree in first.trees] == [tree.export() for tree in second.trees]
        with check:
            assert [tree.features for tree in first.trees] == [tree.features for tree in second.trees]

    def test_default_config_used_when_omitted(self) -> None:
        """Omitting the config trains 100 members."""
        forest = RandomForest(_play_tennis_rows(), "play", random_state=0)
        with check:
            assert forest.config == ForestConfig()
        with check:
            assert len(forest.trees) == 100
        with check:
            assert forest.features == tuple(_PLAY_TENNIS_FEATURES)

    def test_accepts_polars_dataframe(self) -> None:
        """A polars DataFrame trains like the equivalent rows."""
        forest = RandomForest(pl.DataFrame(_xor_rows()), "out", ["a", "b"], _FULL_SAMPLE, random_state=0)
        assert forest.predict_class({"a": 1, "b": 0}) == 1

    def test_invalid_data_rejected_before_training(self) -> None:
        """Empty training data raises before any member is built."""
        with pytest.raises(EmptyDatasetError):
            RandomForest([], "out", ["a", "b"], _FULL_SAMPLE)


class TestPrediction:
    """Tests for predict_class, predict_probability, and predict."""

    def test_xor_forest_predicts_correctly(self) -> None:
        """With full samples every member learns XOR, so the vote is unanimous."""
        # Arrange
        forest = RandomForest(_xor_rows(), "out", ["a", "b"], _FULL_SAMPLE, random_state=0)

        # Act / Assert
        with check:
            assert forest.predict_class({"a": 0, "b": 0}) == 0
        with check:
            assert forest.predict_class({"a": 0, "b": 1}) == 1
        with check:
            assert forest.predict_probability({"a": 0, "b": 1})[1] > 0.99

    def test_probabilities_sum_to_one(self) -> None:
        """Vote shares across predicted classes sum to 1.0."""
        # Arrange
        config = ForestConfig(tree_count=25, row_fraction=0.5, feature_fraction=0.5)
        forest = RandomForest(_play_tennis_rows(), "play", _PLAY_TENNIS_FEATURES, config, random_state=5)

        # Act
        probabilities = forest.predict_probability(_play_tennis_rows()[0])

        # Assert
        with check:
            assert sum(probabilities.values()) == pytest.approx(1.0)
        with check:
            assert set(probabilities) <= {"yes", "no"}

    def test_vote_tie_goes_to_first_voted_class(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """An even split resolves to the class predicted by the earliest member."""
        # Arrange
        forest = RandomForest(_xor_rows(), "out", ["a", "b"], ForestConfig(tree_count=2), random_state=0)
        says_no = DecisionTree([{"x": "a", "label": "no"}], "label", ["x"])
        says_yes = DecisionTree([{"x": "a", "label": "yes"}], "label", ["x"])

        # Act
        monkeypatch.setattr(forest, "trees", (says_no, says_yes))
        first_no = forest.predict_class({"x": "a"})
        monkeypatch.setattr(forest, "trees", (says_yes, says_no))
        first_yes = forest.predict_class({"x": "a"})

        # Assert
        with check:
            assert first_no == "no"
        with check:
            assert first_yes == "yes"
        with check:
            assert forest.predict_probability({"x": "a"}) == {"yes": 0.5, "no": 0.5}

    def test_unseen_values_do_not_raise(self) -> None:
        """Samples with values never seen in training still get a prediction."""
        forest = RandomForest(_play_tennis_rows(), "play", _PLAY_TENNIS_FEATURES, random_state=2)
        assert forest.predict_class({"outlook": "fog", "wind": "gale"}) in {"yes", "no"}

    def test_predict_dispatches_on_kind(self) -> None:
        """`predict` routes to the class or probability prediction."""
        # Arrange
        forest = RandomForest(_xor_rows(), "out", ["a", "b"], _FULL_SAMPLE, random_state=0)
        sample = {"a": 1, "b": 1}

        # Act / Assert
        with check:
            assert forest.predict(sample) == forest.predict_class(sample)
        with check:
            assert forest.predict(sample, "probability") == forest.predict_probability(sample)
        with pytest.raises(ValueError, match="Unexpected prediction kind"):
            forest.predict(sample, "margin")  # type: ignore[call-overload]


class TestEvaluate:
    """Tests for `evaluate` and `feature_importance`."""

    def test_xor_forest_report(self) -> None:
        """A unanimous XOR forest scores perfectly on its training rows."""
        # Arrange
        forest = RandomForest(_xor_rows(), "out", ["a", "b"], _FULL_SAMPLE, random_state=0)

        # Act
        report = forest.evaluate(_xor_rows())

        # Assert
        with check:
            assert report.size == 4
        with check:
            assert report.accuracy == 1.0
        with check:
            assert report.fscore > 0.99
        with check:
            assert [entry.label for entry in report.classes] == [0, 1]
        with check:
            assert report.feature_importance == forest.feature_importance()

    def test_empty_dataset_returns_zero_report(self) -> None:
        """Evaluating no rows returns zero sentinels instead of failing."""
        # Arrange
        forest = RandomForest(_xor_rows(), "out", ["a", "b"], _FULL_SAMPLE, random_state=0)

        # Act
        report = forest.evaluate([])

        # Assert
        with check:
            assert report.size == 0
        with check:
            assert (report.accuracy, report.precision, report.recall, report.fscore) == (0.0, 0.0, 0.0, 0.0)
        with check:
            assert report.classes == []

    def test_repeated_evaluation_is_identical(self) -> None:
        """Evaluation never mutates the forest."""
        forest = RandomForest(_play_tennis_rows(), "play", _PLAY_TENNIS_FEATURES, random_state=4)
        assert forest.evaluate(_play_tennis_rows()) == forest.evaluate(_play_tennis_rows())

    def test_rows_without_target_rejected(self) -> None:
        """Every evaluated row must carry the target attribute."""
        forest = RandomForest(_xor_rows(), "out", ["a", "b"], _FULL_SAMPLE, random_state=0)
        with pytest.raises(AttributesNotFoundError):
            forest.evaluate([{"a": 0, "b": 0}])

    def test_null_target_rejected(self) -> None:
        """A null target in an evaluation frame is an input error, not a report failure."""
        # Arrange
        forest = RandomForest(_xor_rows(), "out", ["a", "b"], _FULL_SAMPLE, random_state=0)
        df = pl.DataFrame({"a": [0, 1], "b": [1, 1], "out": [1, None]})

        # Act / Assert
        with pytest.raises(InvalidInputError, match="Missing value for attribute 'out' in row 1"):
            forest.evaluate(df)

    def test_nan_target_rejected(self) -> None:
        """A NaN target would never match itself, so it is rejected up front."""
        forest = RandomForest(_xor_rows(), "out", ["a", "b"], _FULL_SAMPLE, random_state=0)
        with pytest.raises(InvalidInputError):
            forest.evaluate([{"a": 0, "b": 0, "out": float("nan")}])

    def test_feature_importance_uses_full_training_set(self) -> None:
        """Importance is the root-level gain over all rows and features, not per member."""
        # Arrange
        rows = _play_tennis_rows()
        config = ForestConfig(tree_count=5, row_fraction=0.3, feature_fraction=0.5)
        forest = RandomForest(rows, "play", _PLAY_TENNIS_FEATURES, config, random_state=9)

        # Act
        importance = forest.feature_importance()

        # Assert
        with check:
            assert list(importance) == _PLAY_TENNIS_FEATURES
        with check:
            assert importance == {feature: gain(rows, "play", feature) for feature in _PLAY_TENNIS_FEATURES}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_PLAY_TENNIS_FEATURES = ["outlook", "temperature", "humidity", "wind"]


def _xor_rows() -> list[dict[str, int]]:
    return [
        {"a": 0, "b": 0, "out": 0},
        {"a": 0, "b": 1, "out": 1},
        {"a": 1, "b": 0, "out": 1},
        {"a": 1, "b": 1, "out": 0},
    ]


def _play_tennis_rows() -> list[dict[str, str]]:
    table = [
        ("sunny", "hot", "high", "weak", "no"),
        ("sunny", "hot", "high", "strong", "no"),
        ("overcast", "hot", "high", "weak", "yes"),
        ("rain", "mild", "high", "weak", "yes"),
        ("rain", "cool", "normal", "weak", "yes"),
        ("rain", "cool", "normal", "strong", "no"),
        ("overcast", "cool", "normal", "strong", "yes"),
        ("sunny", "mild", "high", "weak", "no"),
        ("sunny", "cool", "normal", "weak", "yes"),
        ("rain", "mild", "normal", "weak", "yes"),
        ("sunny", "mild", "normal", "strong", "yes"),
        ("overcast", "mild", "high", "strong", "yes"),
        ("overcast", "hot", "normal", "weak", "yes"),
        ("rain", "mild", "high", "strong", "no"),
    ]
    columns = ("outlook", "temperature", "humidity", "wind", "play")
    return [dict(zip(columns, values, strict=True)) for values in table]
