from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, List
import uuid

from doccollab.core.auth import Identity, get_current_identity
from doccollab.core.db import get_db
from doccollab.core.errors import NotFound
from doccollab.domains.access.schemas import SharedDocumentResponse
from doccollab.domains.access.services import AccessControlService
from doccollab.domains.documents.schemas import (
    DocumentCreate, DocumentUpdate, DocumentRename, DocumentMove,
    DocumentResponse, EmptyTrashResponse
)
from doccollab.domains.documents.services import DocumentService

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def create_document(
    document_data: DocumentCreate,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    """Создание нового документа"""
    document = await DocumentService(db).create_document(
        identity,
        title=document_data.title,
        content=document_data.content,
        parent_folder_id=document_data.parent_folder_id
    )
    return DocumentResponse.model_validate(document)


@router.get("", response_model=List[DocumentResponse])
async def list_documents(
    folder_id: Optional[uuid.UUID] = None,
    include_deleted: bool = False,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    """Свои и доступные документы"""
    documents = await DocumentService(db).list_documents(
        identity, folder_id=folder_id, include_deleted=include_deleted
    )
    return [DocumentResponse.model_validate(doc) for doc in documents]


@router.get("/search", response_model=List[DocumentResponse])
async def search_documents(
    q: str = Query("", max_length=100),
    limit: Optional[int] = Query(None, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    """Поиск документов по заголовку"""
    documents = await DocumentService(db).search_documents(identity, q, limit=limit)
    return [DocumentResponse.model_validate(doc) for doc in documents]


@router.get("/recent", response_model=List[DocumentResponse])
async def list_recent_documents(
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    documents = await DocumentService(db).list_recent_documents(identity, limit=limit)
    return [DocumentResponse.model_validate(doc) for doc in documents]


@router.get("/shared", response_model=List[SharedDocumentResponse])
async def list_shared_documents(
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    """Документы, доступные по праву соавтора"""
    shared = await AccessControlService(db).list_shared_documents(identity)
    return [
        SharedDocumentResponse(document=DocumentResponse.model_validate(doc), role=role)
        for doc, role in shared
    ]


@router.get("/trash", response_model=List[DocumentResponse])
async def list_trash(
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    documents = await DocumentService(db).list_trash(identity)
    return [DocumentResponse.model_validate(doc) for doc in documents]


@router.delete("/trash", response_model=EmptyTrashResponse)
async def empty_trash(
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    """Очистка корзины"""
    deleted = await DocumentService(db).empty_trash(identity)
    return EmptyTrashResponse(deleted=deleted)


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    """Получение документа по UUID"""
    document = await DocumentService(db).get_document(document_id, identity)

    if not document:
        raise NotFound("Document not found")

    return DocumentResponse.model_validate(document)


@router.patch("/{document_id}", response_model=DocumentResponse)
async def update_document(
    document_id: uuid.UUID,
    update_data: DocumentUpdate,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    """Обновление документа"""
    document = await DocumentService(db).update_document(document_id, identity, update_data.to_patch())
    return DocumentResponse.model_validate(document)


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    """Перемещение документа в корзину"""
    await DocumentService(db).delete_document(document_id, identity)


@router.post("/{document_id}/rename", response_model=DocumentResponse)
async def rename_document(
    document_id: uuid.UUID,
    rename_data: DocumentRename,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    document = await DocumentService(db).rename_document(document_id, identity, rename_data.title)
    return DocumentResponse.model_validate(document)


@router.post("/{document_id}/move", response_model=DocumentResponse)
async def move_document(
    document_id: uuid.UUID,
    move_data: DocumentMove,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    document = await DocumentService(db).move_document(document_id, identity, move_data.folder_id)
    return DocumentResponse.model_validate(document)


@router.post("/{document_id}/duplicate", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def duplicate_document(
    document_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    document = await DocumentService(db).duplicate_document(document_id, identity)
    return DocumentResponse.model_validate(document)


@router.post("/{document_id}/restore", response_model=DocumentResponse)
async def restore_document(
    document_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    """Восстановление документа из корзины"""
    document = await DocumentService(db).restore_document(document_id, identity)
    return DocumentResponse.model_validate(document)


@router.delete("/{document_id}/permanent", status_code=status.HTTP_204_NO_CONTENT)
async def permanently_delete_document(
    document_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    """Окончательное удаление документа"""
    await DocumentService(db).permanently_delete_document(document_id, identity)
