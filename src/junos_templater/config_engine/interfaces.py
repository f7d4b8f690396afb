"""Extract per-interface attributes from a change list.

Folds ``replace`` records under the ``interfaces`` stanza into a table
keyed by interface name. The values are taken from the old side of each
change, so ``diff(a, b)`` yields the interface values of ``a``.
"""
import logging
from typing import Any, Iterable

from .schema import ChangeKind, ChangeRecord

logger = logging.getLogger(__name__)

INTERFACES_SEGMENT = "interfaces"

InterfaceTable = dict[str, dict[str, Any]]


def deep_set(target: dict[str, Any], dotted_path: str, value: Any) -> None:
    """
    Assign value at a dotted path, creating intermediate mappings.

    Non-mapping values found along the way are replaced by mappings.
    """
    segments = dotted_path.split(".")
    current = target

    for segment in segments[:-1]:
        child = current.get(segment)
        if not isinstance(child, dict):
            child = {}
            current[segment] = child
        current = child

    current[segments[-1]] = value


def attribute_path(semantic_path: list[str]) -> str:
    """Dotted attribute path of a change below its interface."""
    return ".".join(str(segment) for segment in semantic_path[2:])


def add_interface_change(table: InterfaceTable, change: ChangeRecord) -> InterfaceTable:
    """Fold one change into table, returning the same table."""
    path = change.semantic_path
    if change.kind != ChangeKind.REPLACE:
        return table
    if len(path) < 2 or path[0] != INTERFACES_SEGMENT:
        return table

    name = path[1]
    entry = table.get(name)
    if entry is None:
        entry = {"name": name}
        table[name] = entry

    attribute = attribute_path(path)
    if attribute and attribute != "name":
        deep_set(entry, attribute, change.old_value)

    return table


def extract_interfaces(changes: Iterable[ChangeRecord]) -> InterfaceTable:
    """
    Build the interface table from a change list.

    Args:
        changes: Change records, typically ``diff_trees(a, b)``

    Returns:
        Mapping of interface name to its attributes (including ``name``)
    """
    table: InterfaceTable = {}
    for change in changes:
        add_interface_change(table, change)

    logger.debug(f"Extracted {len(table)} interfaces from change list")
    return table
