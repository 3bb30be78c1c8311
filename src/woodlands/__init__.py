"""woodlands: ID3 decision trees and random forests for categorical data."""

from loguru import logger

from woodlands.decision_tree import DecisionTree, entropy, gain
from woodlands.exceptions import InvalidInputError
from woodlands.forest import EvaluationReport, ForestConfig, RandomForest
from woodlands.logging import PACKAGE_NAME, enable_logging

logger.disable(PACKAGE_NAME)  # noqa: RUF067 - Disable logging for the woodlands package by default

__all__ = [
    "DecisionTree",
    "EvaluationReport",
    "ForestConfig",
    "InvalidInputError",
    "RandomForest",
    "enable_logging",
    "entropy",
    "gain",
]
