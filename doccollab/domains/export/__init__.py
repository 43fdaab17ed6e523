from doccollab.domains.export.nodes import parse_content
from doccollab.domains.export.serializers import to_markdown, to_html, to_text, to_json

__all__ = ["parse_content", "to_markdown", "to_html", "to_text", "to_json"]
