"""Write-only output backends for calico values (Markdown)."""

from calico.backends.markdown_generator import save_markdown_file, serialize_markdown

__all__ = ["serialize_markdown", "save_markdown_file"]
