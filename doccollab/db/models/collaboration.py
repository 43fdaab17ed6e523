from sqlalchemy import Column, String, Integer, ForeignKey, Uuid, DateTime, UniqueConstraint

from doccollab.db.base import BaseModel


class DocumentCollaborator(BaseModel):
    __tablename__ = "document_collaborators"
    __table_args__ = (
        UniqueConstraint("document_id", "user_id", name="uq_document_collaborators_document_user"),
    )

    document_id = Column(Uuid(as_uuid=True), ForeignKey("documents.uuid"), nullable=False, index=True)
    user_id = Column(String(255), nullable=False, index=True)
    role = Column(String(16), nullable=False)


class UserPresence(BaseModel):
    __tablename__ = "user_presence"
    __table_args__ = (
        UniqueConstraint("document_id", "user_id", name="uq_user_presence_document_user"),
    )

    document_id = Column(Uuid(as_uuid=True), ForeignKey("documents.uuid"), nullable=False, index=True)
    user_id = Column(String(255), nullable=False, index=True)
    user_name = Column(String(255), nullable=False)
    user_color = Column(String(7), default="#3B82F6")  # Hex color code
    cursor_position = Column(Integer, nullable=True)
    selection_from = Column(Integer, nullable=True)
    selection_to = Column(Integer, nullable=True)
    last_seen = Column(DateTime, nullable=False, index=True)
