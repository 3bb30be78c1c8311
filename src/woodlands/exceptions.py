"""Custom exceptions for woodlands.

All input rejections subclass `InvalidInputError`, itself a `ValueError`:

- EmptyDatasetError: Raised when a model is trained on zero rows.
- AttributesNotFoundError: Raised when rows lack the target or a feature.
- DuplicateFeaturesError: Raised when the feature list repeats a name.
- MixedValueTypesError: Raised when one attribute holds values of several types.
"""

from __future__ import annotations


class InvalidInputError(ValueError):
    """Base exception for training or evaluation input that cannot be used.

    Catch this to handle any input rejection raised by woodlands models.
    """


class EmptyDatasetError(InvalidInputError):
    """Raised when a model is trained on a dataset with no rows."""

    def __init__(self, message: str = "Cannot train on an empty dataset") -> None:
        """Initialize EmptyDatasetError.

        Args:
            message (str): Description of the failure.
        """
        super().__init__(message)


class AttributesNotFoundError(InvalidInputError):
    """Raised when requested attributes are missing from one or more rows.

    Attributes:
        missing_attributes (list[str]): Attribute names that were not found.
        row_index (int | None): Index of the first row lacking an attribute.

    Examples:
        >>> err = AttributesNotFoundError(missing_attributes=["size"], row_index=3)
        >>> err.missing_attributes
        ['size']
        >>> str(err)
        "Attributes not found in row 3: ['size']"
    """

    missing_attributes: list[str]
    row_index: int | None

    def __init__(self, missing_attributes: list[str], row_index: int | None = None) -> None:
        """Initialize AttributesNotFoundError.

        Args:
            missing_attributes (list[str]): Attribute names that were not found.
            row_index (int | None): Index of the offending row, when known.
        """
        location = f" in row {row_index}" if row_index is not None else ""
        super().__init__(f"Attributes not found{location}: {sorted(missing_attributes)}")
        self.missing_attributes = missing_attributes
        self.row_index = row_index


class DuplicateFeaturesError(InvalidInputError):
    """Raised when duplicate feature names are provided.

    Attributes:
        features (list[str]): The feature list that contains duplicates.
        duplicate_features (list[str]): The names that are duplicated (each listed once).

    Examples:
        >>> err = DuplicateFeaturesError(features=["a", "a", "b"])
        >>> err.duplicate_features
        ['a']
    """

    features: list[str]
    duplicate_features: list[str]

    def __init__(self, features: list[str]) -> None:
        """Initialize DuplicateFeaturesError.

        Args:
            features (list[str]): The feature list containing duplicates.
        """
        super().__init__("Duplicate feature names are not allowed")
        self.features = features
        seen: set[str] = set()
        self.duplicate_features = []
        for feature in features:
            if feature in seen and feature not in self.duplicate_features:
                self.duplicate_features.append(feature)
            seen.add(feature)


class MixedValueTypesError(InvalidInputError):
    """Raised when an attribute's training values are of more than one type.

    Values are matched with exact, type-aware equality, so a column mixing
    e.g. `0` and `"0"` would silently produce separate branches.

    Attributes:
        attribute (str): The offending attribute name.
        value_types (list[str]): Names of the value types observed, in first-seen order.
    """

    attribute: str
    value_types: list[str]

    def __init__(self, attribute: str, value_types: list[str]) -> None:
        """Initialize MixedValueTypesError.

        Args:
            attribute (str): The offending attribute name.
            value_types (list[str]): Names of the observed value types.
        """
        super().__init__(f"Attribute '{attribute}' mixes value types: {value_types}")
        self.attribute = attribute
        self.value_types = value_types
