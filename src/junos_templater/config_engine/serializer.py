"""Serializer turning a Node tree back into configuration text.

Inverse of the parser for every tree the parser produces, apart from the
spacing inside multi-word block headers and stripped quote characters.
"""
from .schema import Node, NodeKind

INDENT = "    "


class ConfigSerializer:
    """Render a Node tree as configuration text."""

    def __init__(self, indent: str = INDENT):
        self.indent = indent

    def render(self, tree: Node) -> str:
        """
        Render a tree.

        Args:
            tree: Root node (or any subtree, rendered at depth 0)

        Returns:
            Configuration text without a trailing newline
        """
        return self._render_node(tree, 0)

    def _render_node(self, node: Node, depth: int) -> str:
        pad = self.indent * depth

        if node.kind == NodeKind.ROOT:
            return "\n".join(self._render_node(child, depth) for child in node.children)

        if node.kind == NodeKind.BLOCK:
            return self._render_block(f"{pad}{node.name} {{", node, depth)

        if node.kind in (NodeKind.NAMED_BLOCK, NodeKind.PATTERN_BLOCK):
            return self._render_block(f"{pad}{node.name} {node.value} {{", node, depth)

        if node.kind == NodeKind.DIRECTIVE:
            return f"{pad}{node.name} {node.value};"

        return f"{pad}{node.name};"

    def _render_block(self, header: str, node: Node, depth: int) -> str:
        lines = [header]
        lines.extend(self._render_node(child, depth + 1) for child in node.children)
        lines.append(f"{self.indent * depth}}}")
        return "\n".join(lines)


def tree_to_text(tree: Node) -> str:
    """Render a Node tree as configuration text."""
    return ConfigSerializer().render(tree)
