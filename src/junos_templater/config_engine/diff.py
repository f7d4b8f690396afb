"""Diff engine for calculating changes between two configuration trees.

Walks two JSON-shaped values (usually ``Node.to_dict()`` output) in
lockstep and emits path-addressed change records. Arrays are compared by
index, or, when order is not significant, by greedy structural matching.
"""
import logging
from typing import Any, Optional

from ..utils.logging_config import timed
from .schema import (
    DEFAULT_IGNORED_ATTRIBUTES,
    ChangeKind,
    ChangeRecord,
    DiffOptions,
    JsonValue,
    Node,
    NodeKind,
)

logger = logging.getLogger(__name__)

# Minimum similarity for two array elements to be treated as the same entry
MATCH_THRESHOLD = 0.7
# Score for two objects whose "type" discriminators differ
TYPE_MISMATCH_SCORE = 0.1
# Score for an empty array against a non-empty one
EMPTY_ARRAY_SCORE = 0.3
# Weight of property-name overlap vs identity-property equality
OVERLAP_WEIGHT = 0.5
# Max element pairs sampled when scoring two arrays
ARRAY_SAMPLE_SIZE = 5

IDENTITY_PROPERTIES = ("id", "name", "value", "operator", "key", "kind", "computed")
CONTAINER_TYPES = {
    kind.value for kind in NodeKind if kind.is_container and kind != NodeKind.ROOT
}


def json_type(value: Any) -> str:
    """Classify a value into its JSON type name."""
    # bool first: it is a subclass of int
    if isinstance(value, bool):
        return "boolean"
    if value is None:
        return "null"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def similarity(
    left: Any,
    right: Any,
    ignored: tuple[str, ...] = DEFAULT_IGNORED_ATTRIBUTES,
) -> float:
    """
    Score how alike two values are, from 0.0 to 1.0.

    Only a matching heuristic for realigning array entries; it favours
    stable pairings of near-identical siblings over precision.
    """
    left_type = json_type(left)
    if left_type != json_type(right):
        return 0.0

    if left_type == "array":
        return _array_similarity(left, right, ignored)
    if left_type == "object":
        return _object_similarity(left, right, ignored)

    return 1.0 if left == right else 0.0


def _object_similarity(left: dict, right: dict, ignored: tuple[str, ...]) -> float:
    if left.get("type") != right.get("type"):
        return TYPE_MISMATCH_SCORE

    left_keys = [key for key in left if key not in ignored]
    right_keys = [key for key in right if key not in ignored]
    union = set(left_keys) | set(right_keys)
    if not union:
        return 1.0

    shared = [key for key in left_keys if key in right]
    overlap = len(shared) / len(union)

    identity = [key for key in IDENTITY_PROPERTIES if key in shared] or shared[:3]
    if identity:
        equal = sum(1 for key in identity if left[key] == right[key])
        value_score = equal / len(identity)
    else:
        value_score = 0.0

    return OVERLAP_WEIGHT * overlap + (1 - OVERLAP_WEIGHT) * value_score


def _array_similarity(left: list, right: list, ignored: tuple[str, ...]) -> float:
    if not left and not right:
        return 1.0
    if not left or not right:
        return EMPTY_ARRAY_SCORE

    shorter = min(len(left), len(right))
    length_ratio = shorter / max(len(left), len(right))

    indices = _sample_indices(shorter, ARRAY_SAMPLE_SIZE)
    average = sum(similarity(left[i], right[i], ignored) for i in indices) / len(indices)

    return length_ratio * average


def _sample_indices(length: int, count: int) -> list[int]:
    """Pick up to count evenly spread indices in range(length)."""
    if length <= count:
        return list(range(length))
    step = (length - 1) / (count - 1)
    return sorted({round(i * step) for i in range(count)})


class DiffEngine:
    """Calculate differences between two configuration trees.

    Usage:
        engine = DiffEngine(DiffOptions(order_significant=False))
        changes = engine.diff(old_tree, new_tree)
    """

    def __init__(self, options: Optional[DiffOptions] = None):
        self.options = options or DiffOptions()

    @timed("diff")
    def diff(self, old: Any, new: Any) -> list[ChangeRecord]:
        """
        Calculate the changes that turn old into new.

        Args:
            old: Original tree (Node) or JSON value
            new: Target tree (Node) or JSON value

        Returns:
            Ordered list of ChangeRecord. Not commutative: swap the
            arguments for the reverse direction.
        """
        changes: list[ChangeRecord] = []
        self._diff(_as_json(old), _as_json(new), [], [], self.options.max_depth, changes)

        logger.debug(f"Computed {len(changes)} changes")
        return changes

    def _diff(
        self,
        old: JsonValue,
        new: JsonValue,
        path: list,
        semantic: list[str],
        depth: Optional[int],
        changes: list[ChangeRecord],
    ) -> None:
        old_type = json_type(old)
        new_type = json_type(new)

        if old_type != new_type:
            changes.append(ChangeRecord(
                kind=ChangeKind.REPLACE,
                structural_path=list(path),
                semantic_path=list(semantic),
                old_value=old,
                new_value=new,
                old_type=old_type,
                new_type=new_type,
            ))
            return

        if old_type == "array":
            if self.options.order_significant:
                self._diff_ordered(old, new, path, semantic, depth, changes)
            else:
                self._diff_unordered(old, new, path, semantic, depth, changes)
            return

        if old_type == "object":
            self._diff_object(old, new, path, semantic, depth, changes)
            return

        if old != new:
            changes.append(ChangeRecord(
                kind=ChangeKind.REPLACE,
                structural_path=list(path),
                semantic_path=list(semantic),
                old_value=old,
                new_value=new,
            ))

    def _diff_ordered(self, old, new, path, semantic, depth, changes) -> None:
        """Compare two arrays index by index."""
        for index in range(max(len(old), len(new))):
            if index >= len(old):
                changes.append(self._element_change(ChangeKind.ADD, new[index], index, path, semantic))
            elif index >= len(new):
                changes.append(self._element_change(ChangeKind.REMOVE, old[index], index, path, semantic))
            elif depth != 0:
                self._diff(
                    old[index],
                    new[index],
                    path + [index],
                    _element_path(semantic, old[index], index),
                    _next_depth(depth),
                    changes,
                )

    def _diff_unordered(self, old, new, path, semantic, depth, changes) -> None:
        """Compare two arrays by pairing each old entry with its best new match."""
        ignored = tuple(self.options.ignored_attributes)
        matched: set[int] = set()

        for index, left in enumerate(old):
            best_index: Optional[int] = None
            best_score = 0.0

            for candidate, right in enumerate(new):
                if candidate in matched:
                    continue
                if left == right:
                    best_index, best_score = candidate, 1.0
                    break
                score = similarity(left, right, ignored)
                if score > best_score:
                    best_index, best_score = candidate, score

            if best_index is None or best_score <= MATCH_THRESHOLD:
                changes.append(self._element_change(ChangeKind.REMOVE, left, index, path, semantic))
                continue

            matched.add(best_index)
            if depth != 0:
                self._diff(
                    left,
                    new[best_index],
                    path + [index],
                    _element_path(semantic, left, index),
                    _next_depth(depth),
                    changes,
                )

        for index, right in enumerate(new):
            if index not in matched:
                changes.append(self._element_change(ChangeKind.ADD, right, index, path, semantic))

    def _diff_object(self, old, new, path, semantic, depth, changes) -> None:
        """Compare two mappings property by property."""
        ignored = self.options.ignored_attributes
        properties = list(old) + [key for key in new if key not in old]

        for prop in properties:
            if prop in ignored:
                continue

            if prop not in old:
                changes.append(ChangeRecord(
                    kind=ChangeKind.ADD_ATTRIBUTE,
                    structural_path=path + [prop],
                    semantic_path=semantic + [str(prop)],
                    new_value=new[prop],
                    attribute=prop,
                ))
            elif prop not in new:
                changes.append(ChangeRecord(
                    kind=ChangeKind.REMOVE_ATTRIBUTE,
                    structural_path=path + [prop],
                    semantic_path=semantic + [str(prop)],
                    old_value=old[prop],
                    attribute=prop,
                ))
            elif depth != 0:
                self._diff(
                    old[prop],
                    new[prop],
                    path + [prop],
                    _property_path(semantic, old, prop),
                    _next_depth(depth),
                    changes,
                )

    def _element_change(
        self,
        kind: ChangeKind,
        element: Any,
        index: int,
        path: list,
        semantic: list[str],
    ) -> ChangeRecord:
        """Build an add/remove record for a whole array element."""
        record = ChangeRecord(
            kind=kind,
            structural_path=path + [index],
            semantic_path=_element_path(semantic, element, index),
            node_type=_node_type(element),
        )
        if kind == ChangeKind.ADD:
            record.new_value = element
        else:
            record.old_value = element
        return record


def _as_json(value: Any) -> JsonValue:
    return value.to_dict() if isinstance(value, Node) else value


def _next_depth(depth: Optional[int]) -> Optional[int]:
    if depth is None:
        return None
    return depth - 1 if depth > 0 else 0


def _node_type(element: Any) -> str:
    if isinstance(element, dict) and element.get("type"):
        return str(element["type"])
    return json_type(element)


def _element_path(semantic: list[str], element: Any, index: int) -> list[str]:
    """Semantic path of an array element: its name, or its index if unnamed."""
    if isinstance(element, dict) and element.get("name"):
        name = str(element["name"])
        if semantic and semantic[-1] == name:
            return list(semantic)
        return semantic + [name]
    return semantic + [str(index)]


def _property_path(semantic: list[str], node: dict, prop: str) -> list[str]:
    """Semantic path when stepping from node into one of its properties."""
    name = node.get("name")

    if prop == "children":
        if not name:
            return list(semantic)
        name = str(name)
        result = list(semantic) if semantic and semantic[-1] == name else semantic + [name]
        if node.get("value"):
            result.append(str(node["value"]))
        return result

    if prop == "value" and name:
        # A container's value names the instance ("unit 100"); a leaf's value
        # is already addressed by the leaf name
        if node.get("type") in CONTAINER_TYPES:
            return semantic + ["name"]
        return list(semantic)

    return semantic + [str(prop)]


def diff_trees(
    old: Any,
    new: Any,
    options: Optional[DiffOptions] = None,
    **overrides: Any,
) -> list[ChangeRecord]:
    """
    Diff two trees or JSON values.

    Args:
        old: Original tree
        new: Target tree
        options: Diff options; keyword overrides build one when omitted
            (ignored_attributes, order_significant, max_depth)
    """
    if options is None:
        options = DiffOptions(**overrides)
    elif overrides:
        raise TypeError("diff_trees() takes either options or keyword overrides, not both")
    return DiffEngine(options).diff(old, new)


def _describe(value: Any) -> str:
    if isinstance(value, dict) and "type" in value:
        parts = [value.get("name"), value.get("value")]
        label = " ".join(str(part) for part in parts if part)
        return f"{value['type']} {label}".strip()
    text = repr(value)
    return text if len(text) <= 60 else text[:57] + "..."


def summarize_changes(changes: list[ChangeRecord]) -> str:
    """
    Create a human-readable summary of a change list.

    Useful for CLI output and logging.
    """
    if not changes:
        return "No changes - trees are identical"

    lines = [f"Changes ({len(changes)} total):", ""]
    prefixes = {
        ChangeKind.ADD: "[+]",
        ChangeKind.ADD_ATTRIBUTE: "[+]",
        ChangeKind.REMOVE: "[-]",
        ChangeKind.REMOVE_ATTRIBUTE: "[-]",
        ChangeKind.REPLACE: "[~]",
    }

    for change in changes:
        location = " > ".join(change.semantic_path) or "/".join(
            str(segment) for segment in change.structural_path
        ) or "(root)"
        lines.append(f"  {prefixes[change.kind]} {change.kind.value} {location}")

        if change.kind == ChangeKind.REPLACE:
            lines.append(f"      {_describe(change.old_value)} -> {_describe(change.new_value)}")
        elif change.has_new_value:
            lines.append(f"      {_describe(change.new_value)}")
        else:
            lines.append(f"      (was: {_describe(change.old_value)})")

    return "\n".join(lines)
