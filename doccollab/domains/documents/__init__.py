from doccollab.domains.documents.entities import Document, DocumentPatch, UNSET, EMPTY_CONTENT, default_title

__all__ = ["Document", "DocumentPatch", "UNSET", "EMPTY_CONTENT", "default_title"]
