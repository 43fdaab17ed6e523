from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, Uuid, Index

from doccollab.db.base import BaseModel


class Folder(BaseModel):
    __tablename__ = "folders"

    name = Column(String(255), nullable=False)
    owner_id = Column(String(255), index=True, nullable=False)
    parent_id = Column(Uuid(as_uuid=True), ForeignKey("folders.uuid"), nullable=True, index=True)


class Document(BaseModel):
    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_owner_deleted", "owner_id", "is_deleted"),
    )

    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False, default="")
    owner_id = Column(String(255), index=True, nullable=False)
    is_deleted = Column(Boolean, nullable=False, default=False)
    parent_folder_id = Column(Uuid(as_uuid=True), ForeignKey("folders.uuid"), nullable=True, index=True)
    # Время последнего снимка, условие атомарного автоснимка
    last_snapshot_at = Column(DateTime, nullable=True)


class DocumentVersion(BaseModel):
    __tablename__ = "document_versions"

    document_id = Column(Uuid(as_uuid=True), ForeignKey("documents.uuid"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    title = Column(String(255), nullable=False)
    created_by = Column(String(255), nullable=False)
