import random
import uuid
from datetime import datetime, timedelta
from typing import Optional, Tuple

from doccollab.core.clock import utcnow

PRESENCE_COLORS = [
    "#EF4444", "#F97316", "#EAB308", "#22C55E", "#14B8A6",
    "#3B82F6", "#8B5CF6", "#EC4899", "#F43F5E", "#06B6D4"
]


class UserPresence:
    """Эфемерная отметка присутствия пользователя в документе"""

    def __init__(
        self,
        document_id: uuid.UUID,
        user_id: str,
        user_name: str,
        cursor_position: Optional[int] = None,
        selection: Optional[Tuple[int, int]] = None,
        user_color: Optional[str] = None,
        last_seen: Optional[datetime] = None
    ):
        self.uuid = uuid.uuid4()
        self.document_id = document_id
        self.user_id = user_id
        self.user_name = user_name
        self.cursor_position = cursor_position
        self.selection = selection
        self.user_color = user_color or self._generate_user_color()
        self.last_seen = last_seen or utcnow()

    def update_cursor(
        self,
        position: Optional[int],
        selection: Optional[Tuple[int, int]],
        now: datetime
    ) -> None:
        """Обновление позиции курсора и выделения"""
        self.cursor_position = position
        self.selection = selection
        self.last_seen = now

    def update_selection(self, selection: Tuple[int, int], now: datetime) -> None:
        self.selection = selection
        self.last_seen = now

    def update_activity(self, now: datetime) -> None:
        """Обновление времени последней активности"""
        self.last_seen = now

    def is_active(self, now: datetime, stale_after: timedelta) -> bool:
        return self.last_seen > now - stale_after

    def _generate_user_color(self) -> str:
        """Случайный цвет из палитры"""
        return random.choice(PRESENCE_COLORS)

    def __repr__(self) -> str:
        return f"UserPresence(doc={self.document_id}, user={self.user_id}, last_seen={self.last_seen})"
