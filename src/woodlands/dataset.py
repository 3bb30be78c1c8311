"""Dataset coercion, feature resolution, validation, and the value-equality rule."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import polars as pl

from woodlands.exceptions import (
    AttributesNotFoundError,
    DuplicateFeaturesError,
    EmptyDatasetError,
    InvalidInputError,
    MixedValueTypesError,
)

# ---------------------------------------------------------------------------
# Public type aliases
# ---------------------------------------------------------------------------

type CategoricalValue = bool | int | float | str

type Sample = Mapping[str, Any]

type Row = dict[str, CategoricalValue]

type Dataset = pl.DataFrame | Iterable[Sample]

_SUPPORTED_VALUE_TYPES: tuple[type, ...] = (bool, int, float, str)

# ---------------------------------------------------------------------------
# Public interface -- Coercion
# ---------------------------------------------------------------------------


def as_rows(data: Dataset) -> list[Row]:
    """Copy a dataset into a list of plain row dictionaries.

    Args:
        data (Dataset): A `polars.DataFrame`, or any iterable of mappings
            from attribute name to value.

    Returns:
        list[Row]: One `dict` per row, in input order. Rows are copies, so
            later mutation of the caller's data does not affect a model.

    Raises:
        InvalidInputError: If `data` is a string or any item is not a mapping.

    Examples:
        >>> as_rows(pl.DataFrame({"a": [0, 1], "out": ["x", "y"]}))
        [{'a': 0, 'out': 'x'}, {'a': 1, 'out': 'y'}]
    """
    if isinstance(data, pl.DataFrame):
        return data.to_dicts()
    if isinstance(data, (str, bytes)):
        raise InvalidInputError("Dataset must be a DataFrame or an iterable of mappings, got a string")
    rows: list[Row] = []
    for index, row in enumerate(data):
        if not isinstance(row, Mapping):
            raise InvalidInputError(f"Row {index} is a {type(row).__name__}, expected a mapping")
        rows.append(dict(row))
    return rows


def resolve_features(rows: Sequence[Row], target: str, features: Iterable[str] | None) -> list[str]:
    """Return the candidate feature list for a model.

    Args:
        rows (Sequence[Row]): Training rows.
        target (str): Target attribute name.
        features (Iterable[str] | None): Caller-supplied features. When `None`,
            every attribute of the first row except `target` is used, in key order.

    Returns:
        list[str]: The resolved feature names.

    Raises:
        DuplicateFeaturesError: If a feature name repeats.
        InvalidInputError: If `features` is a single string, or `target` is
            listed as a feature.
    """
    if features is None:
        return [name for name in rows[0] if name != target] if rows else []
    if isinstance(features, str):
        raise InvalidInputError(f"Features must be an iterable of names, got the string '{features}'")
    feature_list = list(features)
    if len(set(feature_list)) != len(feature_list):
        raise DuplicateFeaturesError(feature_list)
    if target in feature_list:
        raise InvalidInputError(f"Target attribute '{target}' cannot also be a feature")
    return feature_list


# ---------------------------------------------------------------------------
# Public interface -- Validation
# ---------------------------------------------------------------------------


def validate_training_rows(rows: Sequence[Row], target: str, features: Sequence[str]) -> None:
    """Reject training data that cannot produce a well-formed tree.

    Args:
        rows (Sequence[Row]): Training rows.
        target (str): Target attribute name.
        features (Sequence[str]): Candidate feature names.

    Raises:
        EmptyDatasetError: If `rows` is empty.
        AttributesNotFoundError: If any row lacks the target or a feature.
        InvalidInputError: If a value is missing (`None`/NaN) or of an unsupported type.
        MixedValueTypesError: If an attribute holds values of more than one type.
    """
    if not rows:
        raise EmptyDatasetError()
    attributes = [target, *features]
    for index, row in enumerate(rows):
        missing = [name for name in attributes if name not in row]
        if missing:
            raise AttributesNotFoundError(missing, row_index=index)
    for name in attributes:
        _validate_column_types(rows, name)


def validate_evaluation_rows(rows: Sequence[Sample], target: str) -> None:
    """Reject evaluation rows whose target cannot be compared with a prediction.

    Unlike training, an evaluation target may mix value types: a target of
    another type than the predictions simply counts as a wrong prediction.

    Args:
        rows (Sequence[Sample]): Rows to score.
        target (str): Target attribute name.

    Raises:
        AttributesNotFoundError: If any row lacks `target`.
        InvalidInputError: If a target value is missing (`None`/NaN) or of an
            unsupported type.
    """
    for index, row in enumerate(rows):
        if target not in row:
            raise AttributesNotFoundError([target], row_index=index)
        _check_value(row[target], target, index)


# ---------------------------------------------------------------------------
# Public interface -- Equality
# ---------------------------------------------------------------------------


def same_value(left: object, right: object) -> bool:
    """Compare two categorical values with exact, type-aware equality.

    Python treats `1 == 1.0 == True`; categorical values only match when
    their types are identical as well.

    Args:
        left (object): First value.
        right (object): Second value.

    Returns:
        bool: `True` when both the types and the values are equal.

    Examples:
        >>> same_value(0, 0)
        True
        >>> same_value(0, "0")
        False
        >>> same_value(1, True)
        False
    """
    return type(left) is type(right) and left == right


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _validate_column_types(rows: Sequence[Row], attribute: str) -> None:
    """Check that one attribute holds supported, non-missing values of a single type.

    Args:
        rows (Sequence[Row]): Training rows (each known to carry `attribute`).
        attribute (str): Attribute to inspect.

    Raises:
        InvalidInputError: On a missing or unsupported value.
        MixedValueTypesError: If several value types are present.
    """
    value_types: list[type] = []
    for index, row in enumerate(rows):
        value = row[attribute]
        _check_value(value, attribute, index)
        if type(value) not in value_types:
            value_types.append(type(value))
    if len(value_types) > 1:
        raise MixedValueTypesError(attribute, [value_type.__name__ for value_type in value_types])


def _check_value(value: object, attribute: str, index: int) -> None:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        raise InvalidInputError(f"Missing value for attribute '{attribute}' in row {index}")
    if not isinstance(value, _SUPPORTED_VALUE_TYPES):
        raise InvalidInputError(
            f"Unsupported value type {type(value).__name__} for attribute '{attribute}' in row {index}"
        )
