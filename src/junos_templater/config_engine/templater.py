"""Template synthesizer.

Collapses sibling subtrees that differ between two related configurations
into a single Jinja2 loop body, replacing concrete values with
``{{variable.path}}`` placeholders taken from a substitution table.

Usage:
    changes = diff_trees(tree_a, tree_b)
    interface = extract_interfaces(changes)["ge-0/0/1"]
    template = synthesize_template(tree_a, changes, {"interface": interface})
    text = cleanup_template_text(tree_to_text(template))
"""
import copy
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Union

from ..utils.logging_config import timed
from .schema import ChangeRecord, Node, NodeKind

logger = logging.getLogger(__name__)

# Loop boundaries and placeholder targets for the physical interface loop
LOOP_OPEN = "{% for interface in interface.physical %}"
LOOP_CLOSE = "{% endfor %}"
LOOP_VARIABLE = "interface"
INTERFACE_NAME_VAR = "interface.name"
INTERFACE_UNIT_VAR = "interface.unit.name"

# Statement name whose dotted value is "<interface>.<unit>"
INTERFACE_REFERENCE = "interface"
INTERFACES_STANZA = "interfaces"

PathKey = tuple[Union[str, int], ...]


@dataclass
class LoopMember:
    """One change collected under a loop group."""
    path: PathKey
    subgroup: int


def placeholder(variable: str) -> str:
    return "{{" + variable + "}}"


def cleanup_template_text(text: str) -> str:
    """Drop the statement separator the serializer appends to loop markers."""
    return text.replace("%};", "%}")


def flatten_reverse(
    substitutions: dict[str, Any],
    prefix: str = "",
    result: Optional[dict[str, str]] = None,
) -> dict[str, str]:
    """
    Map each leaf value of a nested mapping to its dotted path.

    Example:
        {"interface": {"name": "ge-0/0/1"}} -> {"ge-0/0/1": "interface.name"}
    """
    if result is None:
        result = {}

    for key, value in substitutions.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            flatten_reverse(value, path, result)
        elif value is not None and not isinstance(value, (list, tuple)):
            result[str(value)] = path

    return result


def deep_get(data: Any, dotted_path: str) -> Any:
    """Read a dotted path from nested mappings, None when absent."""
    current = data
    for segment in dotted_path.split("."):
        if not isinstance(current, dict) or segment not in current:
            return None
        current = current[segment]
    return current


def find_loop_groups(changes: Iterable[ChangeRecord]) -> dict[PathKey, list[LoopMember]]:
    """
    Group changes by the array that holds the differing sibling.

    The candidate container of a change is its structural path without the
    last two segments. A change whose candidate extends an earlier group
    key joins that group, so nested differences collapse onto their
    outermost repeated element.
    """
    groups: dict[PathKey, list[LoopMember]] = {}

    for change in changes:
        path = tuple(change.structural_path)
        candidate = path[:-2]

        key = next(
            (
                existing for existing in groups
                if existing == candidate
                or (existing and candidate[:len(existing)] == existing)
            ),
            candidate,
        )

        subgroup = path[len(key)] if len(path) > len(key) else None
        if not isinstance(subgroup, int):
            logger.debug(f"No loop subgroup for change at {'.'.join(map(str, path))}")
            continue

        groups.setdefault(key, []).append(LoopMember(path=path, subgroup=subgroup))

    return groups


def _resolve(tree: Node, path: PathKey) -> Any:
    """Follow a structural path through nodes and child lists."""
    current: Any = tree
    for segment in path:
        if isinstance(segment, int):
            current = current[segment]
        elif segment == "type":
            current = current.kind
        else:
            current = getattr(current, segment)
    return current


class TemplateSynthesizer:
    """Rewrite a tree into a loop-based template."""

    @timed("synthesize")
    def synthesize(
        self,
        tree: Node,
        changes: list[ChangeRecord],
        substitutions: dict[str, Any],
    ) -> Node:
        """
        Build a templated copy of tree.

        Args:
            tree: Tree the change list was computed from (left side of the diff)
            changes: Output of diffing tree against a related tree
            substitutions: Variable table, e.g. {"interface": {...}}

        Returns:
            New tree; the input tree is left untouched
        """
        result = copy.deepcopy(tree)
        reverse = flatten_reverse(substitutions)

        for key, members in find_loop_groups(changes).items():
            subgroups = list(dict.fromkeys(member.subgroup for member in members))
            self._collapse(result, key, subgroups, substitutions, reverse)

        return result

    def _collapse(
        self,
        tree: Node,
        key: PathKey,
        subgroups: list[int],
        substitutions: dict[str, Any],
        reverse: dict[str, str],
    ) -> None:
        """Replace the array at key with a loop over its first varying element."""
        location = ".".join(map(str, key))
        try:
            siblings = _resolve(tree, key)
            owner = _resolve(tree, key[:-1])
        except (AttributeError, IndexError, TypeError) as e:
            logger.warning(f"Skipping loop group at {location}: {e}")
            return

        representative = subgroups[0]
        if not isinstance(siblings, list) or not key or representative >= len(siblings):
            logger.warning(f"Skipping loop group at {location}: no element {representative}")
            return

        container_name = getattr(owner, "name", None) or ""
        start_path = container_name.replace(INTERFACES_STANZA, LOOP_VARIABLE, 1)

        rewritten: list[Node] = []
        for index, child in enumerate(siblings):
            if index == representative:
                rewritten.append(Node(NodeKind.FLAG, LOOP_OPEN))
                rewritten.append(self.templatize(child, substitutions, reverse, start_path))
                rewritten.append(Node(NodeKind.FLAG, LOOP_CLOSE))
            elif index not in subgroups:
                rewritten.append(child)

        if isinstance(key[-1], int):
            owner[key[-1]] = rewritten
        else:
            setattr(owner, key[-1], rewritten)

        logger.debug(
            f"Collapsed {len(subgroups)} varying elements at {location} into one loop"
        )

    def templatize(
        self,
        node: Node,
        substitutions: dict[str, Any],
        reverse: dict[str, str],
        curr_path: str,
    ) -> Node:
        """Return a copy of node with concrete values swapped for placeholders."""
        name, value = node.name, node.value

        if name == INTERFACE_REFERENCE and value:
            value = ".".join(
                self._interface_component(part, index, reverse)
                for index, part in enumerate(value.split("."))
            )
        elif isinstance(deep_get(substitutions, curr_path), str):
            value = placeholder(curr_path)
        elif not curr_path.startswith(LOOP_VARIABLE + "."):
            if name and name in reverse:
                name = placeholder(reverse[name])
            if value and value in reverse:
                value = placeholder(reverse[value])

        children = [
            self.templatize(child, substitutions, reverse, f"{curr_path}.{child.name or ''}")
            for child in node.children
        ]
        return Node(node.kind, name, value, children)

    def _interface_component(self, part: str, index: int, reverse: dict[str, str]) -> str:
        """Placeholder for the interface (0) or unit (1) part of "ge-0/0/1.100"."""
        target = reverse.get(part)
        if index == 0 and target == INTERFACE_NAME_VAR:
            return placeholder(target)
        if index == 1 and target == INTERFACE_UNIT_VAR:
            return placeholder(target)
        return part


def synthesize_template(
    tree: Node,
    changes: list[ChangeRecord],
    substitutions: dict[str, Any],
) -> Node:
    """Build a loop-based template tree from tree and its change list."""
    return TemplateSynthesizer().synthesize(tree, changes, substitutions)
