"""Config Engine - parse, diff and templatize Junos-style configurations.

The Config Engine turns device configuration text into a tree, computes
path-addressed differences between two trees, and rewrites repeated
varying stanzas into a Jinja2 loop:
- Parse text into a tree and render it back
- Diff trees by index or by structural similarity
- Extract per-interface variables from a diff
- Synthesize a loop-based template

Usage:
    from junos_templater.config_engine import TemplateEngine

    engine = TemplateEngine()
    text = engine.template_from_pair(config_a, config_b)
"""

from .schema import (
    Node,
    NodeKind,
    ChangeKind,
    ChangeRecord,
    DiffOptions,
    TreeError,
)
from .parser import ConfigParser, ParseDiagnostic, text_to_tree
from .serializer import ConfigSerializer, tree_to_text
from .diff import DiffEngine, diff_trees, similarity, summarize_changes
from .interfaces import extract_interfaces
from .templater import (
    TemplateSynthesizer,
    synthesize_template,
    cleanup_template_text,
)
from .engine import TemplateEngine, TemplateError

__all__ = [
    # Main engine
    "TemplateEngine",
    "TemplateError",
    # Schema classes
    "Node",
    "NodeKind",
    "ChangeKind",
    "ChangeRecord",
    "DiffOptions",
    "TreeError",
    # Parser and serializer
    "ConfigParser",
    "ParseDiagnostic",
    "text_to_tree",
    "ConfigSerializer",
    "tree_to_text",
    # Components (for advanced use)
    "DiffEngine",
    "diff_trees",
    "similarity",
    "summarize_changes",
    "extract_interfaces",
    "TemplateSynthesizer",
    "synthesize_template",
    "cleanup_template_text",
]
