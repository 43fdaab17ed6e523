from doccollab.domains.collaboration.entities import UserPresence, PRESENCE_COLORS

__all__ = ["UserPresence", "PRESENCE_COLORS"]
