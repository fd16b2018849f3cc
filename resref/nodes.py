"""Node variants of a parsed document tree and expected-type descriptors.

A document tree is built from plain Python values as produced by the JSON
and YAML parsers: ``None``, ``bool``, ``int``, ``float``/``Decimal``, ``str``,
``list`` and ``dict``. ``NodeType`` names the variant of a value and
``Expected`` describes which variants a navigation step will accept.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Any


class NodeType(Enum):
    """Variants of a tree node."""

    NULL = "Null"
    BOOLEAN = "Boolean"
    INT = "Int"
    DECIMAL = "Decimal"
    STRING = "String"
    ARRAY = "Array"
    OBJECT = "Object"


def node_type(value: Any) -> NodeType:
    """Classify a tree value.

    Raises:
        TypeError: If the value is not a document node.
    """
    if value is None:
        return NodeType.NULL
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return NodeType.BOOLEAN
    if isinstance(value, int):
        return NodeType.INT
    if isinstance(value, (float, Decimal)):
        return NodeType.DECIMAL
    if isinstance(value, str):
        return NodeType.STRING
    if isinstance(value, (list, tuple)):
        return NodeType.ARRAY
    if isinstance(value, Mapping):
        return NodeType.OBJECT
    raise TypeError(f"Not a document node: {type(value).__name__}")


def is_structure(value: Any) -> bool:
    """Return True for Object and Array nodes."""
    return isinstance(value, (list, tuple, Mapping))


@dataclass(frozen=True)
class Expected:
    """Expected-type descriptor for a navigation step.

    Attributes:
        name: Display name, e.g. "String".
        types: Node variants accepted.
        nullable: Whether the null node is also accepted.
    """

    name: str
    types: frozenset[NodeType]
    nullable: bool = False

    @property
    def or_null(self) -> Expected:
        """The same descriptor, also accepting null."""
        return replace(self, nullable=True)

    def matches(self, value: Any) -> bool:
        if value is None:
            return self.nullable or NodeType.NULL in self.types
        try:
            return node_type(value) in self.types
        except TypeError:
            return False

    def __str__(self) -> str:
        return f"{self.name}?" if self.nullable else self.name


OBJECT = Expected("Object", frozenset({NodeType.OBJECT}))
ARRAY = Expected("Array", frozenset({NodeType.ARRAY}))
STRING = Expected("String", frozenset({NodeType.STRING}))
INT = Expected("Int", frozenset({NodeType.INT}))
DECIMAL = Expected("Decimal", frozenset({NodeType.DECIMAL}))
NUMBER = Expected("Number", frozenset({NodeType.INT, NodeType.DECIMAL}))
BOOLEAN = Expected("Boolean", frozenset({NodeType.BOOLEAN}))
STRUCTURE = Expected("Structure", frozenset({NodeType.OBJECT, NodeType.ARRAY}))
VALUE = Expected("Value", frozenset(NodeType) - {NodeType.NULL})
ANY = VALUE.or_null
