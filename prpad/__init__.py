"""Pull request inspection helpers and rule built-ins for GitHub."""

__version__ = "0.1.0"