from doccollab.db.models.document import Folder, Document, DocumentVersion
from doccollab.db.models.collaboration import DocumentCollaborator, UserPresence

__all__ = [
    "Folder",
    "Document",
    "DocumentVersion",
    "DocumentCollaborator",
    "UserPresence"
]
