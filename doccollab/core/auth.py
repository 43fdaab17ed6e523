from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from doccollab.core.errors import Unauthorized
from doccollab.core.security import verify_token

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """Пользователь, выданный внешним провайдером идентификации"""
    user_id: str
    display_name: str = "Anonymous"


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Identity]:
    """Зависимость: текущий пользователь или None, если токена нет или он невалиден"""
    if credentials is None:
        return None

    payload = verify_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        return None

    display_name = payload.get("name") or payload.get("email") or "Anonymous"
    return Identity(user_id=str(payload["sub"]), display_name=display_name)


def require_identity(identity: Optional[Identity]) -> Identity:
    """Проверка наличия пользователя"""
    if identity is None:
        raise Unauthorized()
    return identity
