"""Pydantic node models for induced ID3 trees."""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

# ---------------------------------------------------------------------------
# Public models
# ---------------------------------------------------------------------------


class LeafNode(BaseModel):
    """A terminal node holding a single predicted class value.

    Attributes:
        kind (Literal["leaf"]): Discriminator field; always `"leaf"`.
        value (bool | int | float | str): The class value predicted at this leaf.
        samples (int): Number of training rows that reached this leaf.

    Examples:
        >>> LeafNode(value="yes", samples=4).model_dump()
        {'kind': 'leaf', 'value': 'yes', 'samples': 4}
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["leaf"] = Field(
        default="leaf",
        description='Discriminator field. Always "leaf".',
    )
    value: bool | int | float | str = Field(
        description="Class value predicted for samples reaching this leaf.",
    )
    samples: int = Field(
        ge=0,
        description="Number of training rows that reached this leaf.",
    )


class Branch(BaseModel):
    """One outgoing edge of a decision node, keyed by an observed feature value.

    Attributes:
        value (bool | int | float | str): The feature value routed down this branch.
        child (LeafNode | DecisionNode): The subtree for rows with that value.
    """

    model_config = ConfigDict(frozen=True)

    value: bool | int | float | str = Field(
        description="Feature value, observed during training, routed down this branch.",
    )
    child: LeafNode | DecisionNode = Field(
        discriminator="kind",
        description="Subtree induced from the training rows carrying this value.",
    )


class DecisionNode(BaseModel):
    """An internal node testing one feature.

    `branches` holds exactly one entry per distinct value of `feature` that
    was present at this node during training, in first-seen order.

    Attributes:
        kind (Literal["decision"]): Discriminator field; always `"decision"`.
        feature (str): Feature tested at this node.
        samples (int): Number of training rows that reached this node.
        branches (tuple[Branch, ...]): Child subtrees keyed by feature value.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["decision"] = Field(
        default="decision",
        description='Discriminator field. Always "decision".',
    )
    feature: str = Field(
        description="Feature tested at this node.",
    )
    samples: int = Field(
        ge=0,
        description="Number of training rows that reached this node.",
    )
    branches: tuple[Branch, ...] = Field(
        min_length=1,
        description="One branch per distinct training value of the feature at this node.",
    )

    def majority_branch(self) -> Branch:
        """Return the branch whose subtree covered the most training rows.

        Ties go to the earliest branch.

        Returns:
            Branch: The fallback branch for values unseen during training.
        """
        return max(self.branches, key=lambda branch: branch.child.samples)


# Use this alias when accepting a node of either kind; pydantic selects the model from `kind`.
type TreeNode = Annotated[LeafNode | DecisionNode, Field(discriminator="kind")]

Branch.model_rebuild()
DecisionNode.model_rebuild()

_TREE_NODE_ADAPTER: TypeAdapter[LeafNode | DecisionNode] = TypeAdapter(
    Annotated[LeafNode | DecisionNode, Field(discriminator="kind")]
)


def parse_tree_node(structure: Any) -> LeafNode | DecisionNode:
    """Validate a plain nested structure into tree node models.

    Args:
        structure (Any): Output of `DecisionTree.export()` or an equivalent
            nested mapping, or an already-built node.

    Returns:
        LeafNode | DecisionNode: The validated root node.

    Raises:
        pydantic.ValidationError: If the structure is not a well-formed tree.
    """
    return _TREE_NODE_ADAPTER.validate_python(structure)
