"""Main Template Engine - orchestrates the parse/diff/template workflow.

Provides a single entry point for:
1. Parsing configuration text into trees
2. Diffing two trees in both directions
3. Extracting per-interface variables from a diff
4. Generating Jinja2 template text
"""
import logging
from typing import Any, Optional

from ..config.settings import TemplaterSettings
from ..utils.logging_config import timed_section
from .diff import DiffEngine
from .interfaces import InterfaceTable, extract_interfaces
from .parser import ConfigParser, ParseDiagnostic
from .schema import ChangeRecord, Node
from .serializer import ConfigSerializer
from .templater import TemplateSynthesizer, cleanup_template_text

logger = logging.getLogger(__name__)


class TemplateError(Exception):
    """Error generating a template."""
    pass


class TemplateEngine:
    """
    Main engine for turning related configurations into a template.

    Usage:
        engine = TemplateEngine()
        text = engine.template_from_pair(config_a, config_b)
    """

    def __init__(self, settings: Optional[TemplaterSettings] = None):
        """
        Initialize the Template Engine.

        Args:
            settings: Diff and logging settings (defaults when omitted)
        """
        self.settings = settings or TemplaterSettings()
        self.parser = ConfigParser()
        self.serializer = ConfigSerializer()
        self.diff_engine = DiffEngine(self.settings.to_diff_options())
        self.synthesizer = TemplateSynthesizer()
        self.diagnostics: list[ParseDiagnostic] = []

    def parse(self, text: str, label: Optional[str] = None) -> Node:
        """Parse configuration text, keeping the parser diagnostics."""
        with timed_section("parse", label=label):
            tree = self.parser.parse(text)
        self.diagnostics = list(self.parser.diagnostics)
        return tree

    def render(self, tree: Node) -> str:
        """Render a tree back into configuration text."""
        return self.serializer.render(tree)

    def diff(self, old: Node, new: Node) -> tuple[list[ChangeRecord], list[ChangeRecord]]:
        """
        Diff two trees in both directions.

        Returns:
            (changes from old to new, changes from new to old)
        """
        forward = self.diff_engine.diff(old, new)
        backward = self.diff_engine.diff(new, old)
        logger.info(f"Diff: {len(forward)} forward changes, {len(backward)} backward changes")
        return forward, backward

    def extract_variables(self, changes: list[ChangeRecord]) -> InterfaceTable:
        """Build the interface table of the left side of a diff."""
        return extract_interfaces(changes)

    def generate_template(
        self,
        tree: Node,
        changes: list[ChangeRecord],
        interface: dict[str, Any],
    ) -> str:
        """
        Generate Jinja2 text for tree.

        Args:
            tree: Left side of the diff that produced changes
            changes: Change list from tree to a related tree
            interface: Interface attributes used as substitutions

        Returns:
            Template text with loop markers and placeholders
        """
        with timed_section("template", label=interface.get("name")):
            templated = self.synthesizer.synthesize(tree, changes, {"interface": interface})
            text = cleanup_template_text(self.serializer.render(templated))
        return text

    def template_from_pair(
        self,
        old_text: str,
        new_text: str,
        interface_name: Optional[str] = None,
    ) -> str:
        """
        Full pipeline: parse both configs, diff, extract and template.

        Args:
            old_text: Configuration the template is built from
            new_text: Related configuration used to find the varying parts
            interface_name: Interface whose values become placeholders
                (first extracted interface when omitted)

        Raises:
            TemplateError: If the requested interface is not in the diff
        """
        old = self.parse(old_text, label="old")
        new = self.parse(new_text, label="new")
        changes, _ = self.diff(old, new)
        interfaces = self.extract_variables(changes)

        if interface_name is None:
            if not interfaces:
                logger.info("No varying interfaces found, template has no placeholders")
            interface = next(iter(interfaces.values()), {})
        elif interface_name in interfaces:
            interface = interfaces[interface_name]
        else:
            raise TemplateError(
                f"Interface {interface_name!r} not found in diff. "
                f"Available: {', '.join(interfaces) or 'none'}"
            )

        return self.generate_template(old, changes, interface)
