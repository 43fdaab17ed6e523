from dataclasses import dataclass
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
import re
import uuid

from doccollab.core.auth import Identity
from doccollab.core.errors import NotFound
from doccollab.domains.access.services import AccessControlService
from doccollab.domains.documents.entities import Document
from doccollab.domains.export import serializers

# format -> (расширение, media type)
EXPORT_FORMATS = {
    "markdown": (".md", "text/markdown"),
    "html": (".html", "text/html"),
    "text": (".txt", "text/plain"),
    "json": (".json", "application/json"),
}

_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]+')


@dataclass(frozen=True)
class ExportResult:
    title: str
    content: str
    format: str
    filename: str
    media_type: str


def export_filename(title: str, format: str) -> str:
    """Имя файла для выгрузки"""
    extension, _ = EXPORT_FORMATS[format]
    stem = _UNSAFE_FILENAME_CHARS.sub("_", title).strip() or "document"
    return f"{stem}{extension}"


class ExportService:
    """Сервис выгрузки документов"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.access = AccessControlService(session)

    async def export_to_markdown(self, document_id: uuid.UUID, identity: Optional[Identity]) -> ExportResult:
        document = await self._readable_document(document_id, identity)
        return self._result(document, "markdown", serializers.to_markdown(document.content))

    async def export_to_html(
        self,
        document_id: uuid.UUID,
        identity: Optional[Identity],
        include_styles: bool = True
    ) -> ExportResult:
        document = await self._readable_document(document_id, identity)
        content = serializers.to_html(document.content, include_styles=include_styles, title=document.title)
        return self._result(document, "html", content)

    async def export_to_text(self, document_id: uuid.UUID, identity: Optional[Identity]) -> ExportResult:
        document = await self._readable_document(document_id, identity)
        return self._result(document, "text", serializers.to_text(document.content))

    async def export_to_json(self, document_id: uuid.UUID, identity: Optional[Identity]) -> ExportResult:
        document = await self._readable_document(document_id, identity)
        return self._result(document, "json", serializers.to_json(document.content))

    async def export(
        self,
        document_id: uuid.UUID,
        identity: Optional[Identity],
        format: str,
        include_styles: bool = True
    ) -> ExportResult:
        """Выгрузка в указанном формате"""
        if format == "markdown":
            return await self.export_to_markdown(document_id, identity)
        if format == "html":
            return await self.export_to_html(document_id, identity, include_styles=include_styles)
        if format == "text":
            return await self.export_to_text(document_id, identity)
        if format == "json":
            return await self.export_to_json(document_id, identity)
        raise NotFound(f"Unsupported export format: {format}")

    async def _readable_document(self, document_id: uuid.UUID, identity: Optional[Identity]) -> Document:
        found = await self.access.find_accessible(document_id, identity)
        if found is None:
            raise NotFound("Document not found or access denied")
        return found[0]

    def _result(self, document: Document, format: str, content: str) -> ExportResult:
        _, media_type = EXPORT_FORMATS[format]
        return ExportResult(
            title=document.title,
            content=content,
            format=format,
            filename=export_filename(document.title, format),
            media_type=media_type
        )
