from doccollab.api.http.health import router as health_router
from doccollab.api.http.documents import router as documents_router
from doccollab.api.http.access import router as access_router
from doccollab.api.http.versions import router as versions_router
from doccollab.api.http.export import router as export_router
from doccollab.api.http.collaboration import router as collaboration_router
from doccollab.api.http.folders import router as folders_router

__all__ = [
    "health_router",
    "documents_router",
    "access_router",
    "versions_router",
    "export_router",
    "collaboration_router",
    "folders_router"
]
