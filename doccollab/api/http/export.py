from typing import Literal, Optional
from urllib.parse import quote
from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from doccollab.core.auth import Identity, get_current_identity
from doccollab.core.db import get_db
from doccollab.domains.export.schemas import ExportResponse
from doccollab.domains.export.services import ExportService

router = APIRouter(prefix="/documents/{document_id}/export", tags=["export"])


def content_disposition(filename: str) -> str:
    """Заголовок вложения: ASCII-имя для старых клиентов и UTF-8 имя по RFC 5987"""
    fallback = filename.encode("ascii", "replace").decode("ascii").replace("?", "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


@router.get("/{format}", response_model=ExportResponse)
async def export_document(
    document_id: uuid.UUID,
    format: Literal["markdown", "html", "text", "json"],
    include_styles: bool = True,
    download: bool = False,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    """Выгрузка документа; download=true отдает файл"""
    result = await ExportService(db).export(document_id, identity, format, include_styles=include_styles)

    if download:
        return Response(
            content=result.content,
            media_type=result.media_type,
            headers={"Content-Disposition": content_disposition(result.filename)}
        )
    return ExportResponse.model_validate(result)
