from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, List
import uuid

from doccollab.core.auth import Identity, get_current_identity
from doccollab.core.db import get_db
from doccollab.core.errors import NotFound
from doccollab.domains.documents.schemas import DocumentResponse
from doccollab.domains.versions.schemas import (
    VersionResponse, AutoVersionResponse, VersionCountResponse, VersionComparisonResponse
)
from doccollab.domains.versions.services import VersionService

router = APIRouter(tags=["versions"])


@router.get("/documents/{document_id}/versions", response_model=List[VersionResponse])
async def list_versions(
    document_id: uuid.UUID,
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    """История версий документа, новые первыми"""
    versions = await VersionService(db).list_versions(document_id, identity, limit=limit)
    return [VersionResponse.model_validate(v) for v in versions]


@router.post(
    "/documents/{document_id}/versions",
    response_model=VersionResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_version(
    document_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    """Снимок текущего состояния"""
    version = await VersionService(db).create_version(document_id, identity)
    return VersionResponse.model_validate(version)


@router.post("/documents/{document_id}/versions/auto", response_model=AutoVersionResponse)
async def auto_create_version(
    document_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    created = await VersionService(db).auto_create_version(document_id, identity)
    return AutoVersionResponse(created=created)


@router.get("/documents/{document_id}/versions/count", response_model=VersionCountResponse)
async def get_version_count(
    document_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    count = await VersionService(db).get_version_count(document_id, identity)
    return VersionCountResponse(count=count)


@router.get("/versions/compare", response_model=VersionComparisonResponse)
async def compare_versions(
    first: uuid.UUID,
    second: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    """Сравнение двух версий одного документа"""
    comparison = await VersionService(db).compare_versions(first, second, identity)
    if comparison is None:
        raise NotFound("Versions not found or access denied")
    return VersionComparisonResponse.model_validate(comparison)


@router.get("/versions/{version_id}", response_model=VersionResponse)
async def get_version(
    version_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    version = await VersionService(db).get_version(version_id, identity)
    if version is None:
        raise NotFound("Version not found")
    return VersionResponse.model_validate(version)


@router.post("/versions/{version_id}/restore", response_model=DocumentResponse)
async def restore_version(
    version_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    """Восстановление документа из версии"""
    document = await VersionService(db).restore_version(version_id, identity)
    return DocumentResponse.model_validate(document)


@router.delete("/versions/{version_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_version(
    version_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    await VersionService(db).delete_version(version_id, identity)
