from doccollab.domains.versions.entities import (
    DocumentVersion, surplus_versions, MAX_VERSIONS, MIN_VERSION_INTERVAL
)

__all__ = ["DocumentVersion", "surplus_versions", "MAX_VERSIONS", "MIN_VERSION_INTERVAL"]
