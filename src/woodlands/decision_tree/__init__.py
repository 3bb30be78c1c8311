"""Decision tree sub-package: node models, information measures, induction, and the classifier."""

from __future__ import annotations

from woodlands.decision_tree.induction import build_tree
from woodlands.decision_tree.information import best_feature, entropy, gain, majority_value
from woodlands.decision_tree.models import Branch, DecisionNode, LeafNode, TreeNode
from woodlands.decision_tree.tree import DecisionTree

__all__ = [
    "Branch",
    "DecisionNode",
    "DecisionTree",
    "LeafNode",
    "TreeNode",
    "best_feature",
    "build_tree",
    "entropy",
    "gain",
    "majority_value",
]
