"""Multi-class evaluation: per-class precision, recall, F1, and macro averages."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from pydantic import BaseModel, Field

from woodlands.dataset import CategoricalValue, same_value

# ---------------------------------------------------------------------------
# Public models
# ---------------------------------------------------------------------------


class ClassReport(BaseModel):
    """Counts and derived metrics for one class value.

    Attributes:
        label (bool | int | float | str): The class value.
        size (int): Rows whose actual target is `label`.
        predicted (int): Rows predicted as `label`.
        predicted_correct (int): Rows predicted as `label` whose target is `label`.
        precision (float): `predicted_correct / predicted`, or `0.0` when nothing was predicted.
        recall (float): `predicted_correct / size`, or `0.0` when the class never occurs.
        fscore (float): Harmonic mean of precision and recall, or `0.0` when both are zero.
    """

    label: bool | int | float | str = Field(description="The class value.")
    size: int = Field(ge=0, description="Rows whose actual target is this class.")
    predicted: int = Field(ge=0, description="Rows predicted as this class.")
    predicted_correct: int = Field(ge=0, description="Correct predictions of this class.")
    precision: float = Field(ge=0.0, le=1.0, description="Correct predictions over all predictions of this class.")
    recall: float = Field(ge=0.0, le=1.0, description="Correct predictions over actual occurrences of this class.")
    fscore: float = Field(ge=0.0, le=1.0, description="Harmonic mean of precision and recall.")


class EvaluationReport(BaseModel):
    """Structured output of `RandomForest.evaluate`.

    Attributes:
        size (int): Number of evaluated rows.
        correct (int): Rows predicted correctly.
        incorrect (int): Rows predicted incorrectly.
        accuracy (float): `correct / size`, or `0.0` for an empty dataset.
        precision (float): Unweighted mean of per-class precision.
        recall (float): Unweighted mean of per-class recall.
        fscore (float): Unweighted mean of per-class F1.
        classes (list[ClassReport]): One entry per class value seen among
            predictions or targets, in first-seen order.
        feature_importance (dict[str, float]): Root-level information gain per feature.
    """

    size: int = Field(ge=0, description="Number of evaluated rows.")
    correct: int = Field(ge=0, description="Rows predicted correctly.")
    incorrect: int = Field(ge=0, description="Rows predicted incorrectly.")
    accuracy: float = Field(ge=0.0, le=1.0, description="Fraction of rows predicted correctly.")
    precision: float = Field(ge=0.0, le=1.0, description="Macro-averaged precision.")
    recall: float = Field(ge=0.0, le=1.0, description="Macro-averaged recall.")
    fscore: float = Field(ge=0.0, le=1.0, description="Macro-averaged F1 score.")
    classes: list[ClassReport] = Field(description="Per-class counts and metrics in first-seen order.")
    feature_importance: dict[str, float] = Field(description="Root-level information gain per feature.")

    def class_report(self, label: CategoricalValue) -> ClassReport:
        """Return the entry for one class value.

        Args:
            label (CategoricalValue): The class value, matched type-aware.

        Returns:
            ClassReport: The matching per-class entry.

        Raises:
            KeyError: If `label` never appeared among predictions or targets.
        """
        for entry in self.classes:
            if same_value(entry.label, label):
                return entry
        raise KeyError(label)


# ---------------------------------------------------------------------------
# Public interface
# ---------------------------------------------------------------------------


def safe_divide(numerator: float, denominator: float) -> float:
    """Divide, resolving a zero denominator to `0.0`.

    Examples:
        >>> safe_divide(1, 4)
        0.25
        >>> safe_divide(3, 0)
        0.0
    """
    return numerator / denominator if denominator else 0.0


def build_report(
    actual: Sequence[CategoricalValue],
    predicted: Sequence[CategoricalValue],
    *,
    feature_importance: Mapping[str, float],
) -> EvaluationReport:
    """Tally predictions against targets into an `EvaluationReport`.

    For each row the predicted class is registered before the actual class,
    which fixes the order of `classes`.

    Args:
        actual (Sequence[CategoricalValue]): Target values, one per row.
        predicted (Sequence[CategoricalValue]): Predicted values, parallel to `actual`.
        feature_importance (Mapping[str, float]): Importance scores to attach.

    Returns:
        EvaluationReport: Counts, per-class metrics, and macro averages.

    Raises:
        ValueError: If `actual` and `predicted` differ in length.
    """
    if len(actual) != len(predicted):
        raise ValueError(f"Got {len(actual)} targets but {len(predicted)} predictions")

    tallies: list[_Tally] = []
    correct = 0
    for actual_value, predicted_value in zip(actual, predicted, strict=True):
        predicted_tally = _tally_for(tallies, predicted_value)
        actual_tally = _tally_for(tallies, actual_value)
        predicted_tally.predicted += 1
        actual_tally.size += 1
        if same_value(actual_value, predicted_value):
            correct += 1
            predicted_tally.predicted_correct += 1

    classes = [tally.to_report() for tally in tallies]
    return EvaluationReport(
        size=len(actual),
        correct=correct,
        incorrect=len(actual) - correct,
        accuracy=safe_divide(correct, len(actual)),
        precision=safe_divide(sum(entry.precision for entry in classes), len(classes)),
        recall=safe_divide(sum(entry.recall for entry in classes), len(classes)),
        fscore=safe_divide(sum(entry.fscore for entry in classes), len(classes)),
        classes=classes,
        feature_importance=dict(feature_importance),
    )


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


class _Tally:
    """Mutable per-class counters used while scanning rows."""

    def __init__(self, label: CategoricalValue) -> None:
        self.label = label
        self.size = 0
        self.predicted = 0
        self.predicted_correct = 0

    def to_report(self) -> ClassReport:
        precision = safe_divide(self.predicted_correct, self.predicted)
        recall = safe_divide(self.predicted_correct, self.size)
        return ClassReport(
            label=self.label,
            size=self.size,
            predicted=self.predicted,
            predicted_correct=self.predicted_correct,
            precision=precision,
            recall=recall,
            fscore=safe_divide(2 * precision * recall, precision + recall),
        )


def _tally_for(tallies: list[_Tally], label: CategoricalValue) -> _Tally:
    for tally in tallies:
        if same_value(tally.label, label):
            return tally
    tally = _Tally(label)
    tallies.append(tally)
    return tally
