from doccollab.db.repositories.document_repository import DocumentRepository
from doccollab.db.repositories.version_repository import DocumentVersionRepository
from doccollab.db.repositories.folder_repository import FolderRepository
from doccollab.db.repositories.collaboration_repository import (
    CollaboratorRepository, PresenceRepository
)

__all__ = [
    "DocumentRepository",
    "DocumentVersionRepository",
    "FolderRepository",
    "CollaboratorRepository",
    "PresenceRepository"
]
