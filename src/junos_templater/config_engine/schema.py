"""Schema definitions for the Config Engine.

Defines the configuration tree node and the change records produced by
the diff engine.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

# JSON-shaped value accepted by the diff engine
JsonValue = Union[dict[str, Any], list[Any], str, int, float, bool, None]

# Metadata properties skipped by the diff engine unless overridden
DEFAULT_IGNORED_ATTRIBUTES = ("loc", "location", "position", "range", "line")


class TreeError(ValueError):
    """Error converting a mapping into a configuration tree."""
    pass


class NodeKind(str, Enum):
    """Kind of a configuration tree node."""
    ROOT = "root"
    BLOCK = "block"                  # interfaces {
    NAMED_BLOCK = "named-block"      # unit 100 {
    PATTERN_BLOCK = "pattern-block"  # interface-range <ge-*> {
    DIRECTIVE = "directive"          # family inet;
    FLAG = "flag"                    # primary;

    @property
    def is_container(self) -> bool:
        """Whether nodes of this kind may hold children."""
        return self not in (NodeKind.DIRECTIVE, NodeKind.FLAG)


class ChangeKind(str, Enum):
    """Type of change in a diff."""
    ADD = "add"
    REMOVE = "remove"
    REPLACE = "replace"
    ADD_ATTRIBUTE = "add-attribute"
    REMOVE_ATTRIBUTE = "remove-attribute"


@dataclass
class Node:
    """A single configuration tree node.

    Nodes are plain values: they hold no reference to their parent, so code
    that needs the ancestry carries the path alongside the node.
    """
    kind: NodeKind
    name: Optional[str] = None
    value: Optional[str] = None
    children: list["Node"] = field(default_factory=list)

    @classmethod
    def root(cls, children: Optional[list["Node"]] = None) -> "Node":
        return cls(NodeKind.ROOT, children=list(children or []))

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape used on the wire and by the diff engine."""
        return {
            "type": self.kind.value,
            "name": self.name,
            "value": self.value,
            "children": [child.to_dict() for child in self.children],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Node":
        """Build a tree from its JSON shape.

        Raises:
            TreeError: If data is not a mapping or names an unknown node type
        """
        if not isinstance(data, dict):
            raise TreeError(f"Expected a mapping, got {type(data).__name__}")

        try:
            kind = NodeKind(data.get("type"))
        except ValueError:
            raise TreeError(f"Unknown node type: {data.get('type')!r}")

        return cls(
            kind=kind,
            name=data.get("name"),
            value=data.get("value"),
            children=[cls.from_dict(child) for child in data.get("children") or []],
        )


@dataclass
class DiffOptions:
    """Options for the diff engine."""
    ignored_attributes: tuple[str, ...] = DEFAULT_IGNORED_ATTRIBUTES
    order_significant: bool = True
    max_depth: Optional[int] = None  # None means unbounded


@dataclass
class ChangeRecord:
    """A single path-addressed change between two trees."""
    kind: ChangeKind
    structural_path: list[Union[str, int]] = field(default_factory=list)
    semantic_path: list[str] = field(default_factory=list)
    old_value: Any = None
    new_value: Any = None
    attribute: Optional[str] = None  # property name for attribute records
    node_type: Optional[str] = None
    old_type: Optional[str] = None
    new_type: Optional[str] = None

    @property
    def has_old_value(self) -> bool:
        return self.kind in (
            ChangeKind.REPLACE, ChangeKind.REMOVE, ChangeKind.REMOVE_ATTRIBUTE
        )

    @property
    def has_new_value(self) -> bool:
        return self.kind in (
            ChangeKind.REPLACE, ChangeKind.ADD, ChangeKind.ADD_ATTRIBUTE
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: dict[str, Any] = {
            "type": self.kind.value,
            "path": [str(segment) for segment in self.structural_path],
            "semanticPath": list(self.semantic_path),
        }
        if self.has_old_value:
            data["oldValue"] = self.old_value
        if self.has_new_value:
            data["newValue"] = self.new_value
        for key, value in (
            ("property", self.attribute),
            ("nodeType", self.node_type),
            ("oldType", self.old_type),
            ("newType", self.new_type),
        ):
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChangeRecord":
        """Rebuild a record from ``to_dict`` output."""
        return cls(
            kind=ChangeKind(data["type"]),
            structural_path=[
                int(segment) if str(segment).isdigit() else segment
                for segment in data.get("path", [])
            ],
            semantic_path=list(data.get("semanticPath", [])),
            old_value=data.get("oldValue"),
            new_value=data.get("newValue"),
            attribute=data.get("property"),
            node_type=data.get("nodeType"),
            old_type=data.get("oldType"),
            new_type=data.get("newType"),
        )
