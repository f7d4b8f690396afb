"""Parser for Junos-style configuration text.

Converts curly-brace configuration text into a Node tree without relying
on specific keywords, so any stanza layout is accepted. Lines that fit no
rule are skipped and reported as diagnostics.
"""
import logging
import re
from dataclasses import dataclass

from .schema import Node, NodeKind

logger = logging.getLogger(__name__)

# "interface-range <ge-*> {"
PATTERN_BLOCK_RE = re.compile(r"^(\S+)\s+(<[^>]+>)\s+\{$")
# "interfaces {", "unit 100 {"
BLOCK_RE = re.compile(r"^(.+)\s+\{$")
# "family inet;", "primary;"
LEAF_RE = re.compile(r"^(.+);$")

CLOSE_BRACE = "}"


@dataclass
class ParseDiagnostic:
    """A line the parser could not make sense of."""
    line_number: int  # 1-based, in the original text
    content: str
    message: str = "Could not parse line"

    def __str__(self) -> str:
        return f"{self.message} {self.line_number}: {self.content!r}"


def strip_comment(line: str) -> str:
    """Drop a trailing ``#`` comment that is not inside a quoted string."""
    in_quotes = False
    for index, char in enumerate(line):
        if char == '"':
            in_quotes = not in_quotes
        elif char == "#" and not in_quotes:
            return line[:index]
    return line


class ConfigParser:
    """Parse configuration text into a Node tree.

    Usage:
        parser = ConfigParser()
        tree = parser.parse(text)
        for diagnostic in parser.diagnostics:
            ...
    """

    def __init__(self):
        self.diagnostics: list[ParseDiagnostic] = []
        self._line_numbers: list[int] = []

    def parse(self, text: str) -> Node:
        """
        Parse configuration text.

        Args:
            text: Raw configuration text

        Returns:
            Root Node of the parsed tree. Never raises on malformed input;
            unparseable lines are recorded in ``self.diagnostics``.
        """
        self.diagnostics = []
        self._line_numbers = []
        lines = self._preprocess(text)
        root = Node.root()

        index = 0
        while index < len(lines):
            index = self._parse_block(lines, index, root)
            if index < len(lines):
                # Only a stray closing brace can hand control back to the root
                self._report(index, lines[index], "Unbalanced closing brace on line")
                index += 1

        logger.debug(
            f"Parsed {len(lines)} lines into {len(root.children)} top-level nodes "
            f"({len(self.diagnostics)} diagnostics)"
        )
        return root

    def _preprocess(self, text: str) -> list[str]:
        """Strip comments and whitespace, drop blank lines."""
        lines = []
        for number, raw in enumerate(text.splitlines(), start=1):
            line = strip_comment(raw).strip()
            if line:
                lines.append(line)
                self._line_numbers.append(number)
        return lines

    def _parse_block(self, lines: list[str], start: int, parent: Node) -> int:
        """
        Parse statements into parent until its closing brace.

        Returns:
            Index of the closing brace line when it ends this block, or
            len(lines) at end of input.
        """
        index = start

        while index < len(lines):
            line = lines[index]

            if line == CLOSE_BRACE:
                return index

            match = PATTERN_BLOCK_RE.match(line)
            if match:
                node = Node(NodeKind.PATTERN_BLOCK, match.group(1), match.group(2))
                index = self._parse_body(lines, index, parent, node)
                continue

            match = BLOCK_RE.match(line)
            if match:
                parts = match.group(1).split()
                if len(parts) == 1:
                    node = Node(NodeKind.BLOCK, parts[0])
                else:
                    node = Node(NodeKind.NAMED_BLOCK, parts[0], " ".join(parts[1:]))
                index = self._parse_body(lines, index, parent, node)
                continue

            match = LEAF_RE.match(line)
            if match:
                parent.children.append(self._parse_leaf(match.group(1).strip()))
                index += 1
                continue

            self._report(index, line)
            index += 1

        return index

    def _parse_body(
        self,
        lines: list[str],
        header_index: int,
        parent: Node,
        node: Node
    ) -> int:
        """Attach node to parent, fill it and return the index after its body."""
        parent.children.append(node)
        end = self._parse_block(lines, header_index + 1, node)

        if end >= len(lines):
            line_number = self._line_numbers[header_index]
            logger.warning(f"Block '{node.name}' opened on line {line_number} is never closed")
            return end

        return end + 1

    def _parse_leaf(self, statement: str) -> Node:
        """Build a directive or flag from a statement without its semicolon."""
        parts = statement.split()
        if len(parts) > 1:
            value = " ".join(parts[1:]).replace('"', "")
            return Node(NodeKind.DIRECTIVE, parts[0], value)

        return Node(NodeKind.FLAG, statement)

    def _report(self, index: int, line: str, message: str = "Could not parse line") -> None:
        diagnostic = ParseDiagnostic(
            line_number=self._line_numbers[index], content=line, message=message
        )
        self.diagnostics.append(diagnostic)
        logger.warning(str(diagnostic))


def text_to_tree(text: str) -> Node:
    """Parse configuration text into a Node tree."""
    return ConfigParser().parse(text)
