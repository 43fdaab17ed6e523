from doccollab.domains.folders.entities import Folder

__all__ = ["Folder"]
