"""junos-templater - turn Junos-style configurations into Jinja2 templates."""

__version__ = "0.1.0"
