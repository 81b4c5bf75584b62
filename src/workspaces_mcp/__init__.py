"""Top‑level package for Workspaces MCP.

This package exposes workspaces (project folders) and reusable markdown
instructions to MCP clients as resources and tools.  See `README.md` for more
information.
"""

__all__ = ["__version__"]
__version__ = "1.0.0"
