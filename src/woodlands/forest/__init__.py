"""Random forest sub-package: member sampling, the ensemble, and its evaluation report."""

from __future__ import annotations

from woodlands.forest.evaluation import ClassReport, EvaluationReport, build_report
from woodlands.forest.forest import ForestConfig, RandomForest
from woodlands.forest.sampling import MemberSample, draw_member_sample, sample_size, spawn_member_seeds

__all__ = [
    "ClassReport",
    "EvaluationReport",
    "ForestConfig",
    "MemberSample",
    "RandomForest",
    "build_report",
    "draw_member_sample",
    "sample_size",
    "spawn_member_seeds",
]
