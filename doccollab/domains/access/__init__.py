from doccollab.domains.access.entities import Role, CollaboratorGrant, ResolvedAccess, resolve_access

__all__ = ["Role", "CollaboratorGrant", "ResolvedAccess", "resolve_access"]
