"""Resources, prompts and completions."""

from assistants_mcp.content.catalog import ContentCatalog, get_catalog

__all__ = ["ContentCatalog", "get_catalog"]
