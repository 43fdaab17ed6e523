"""Ошибки доменного слоя.

Каждая ошибка несет машиночитаемый код и сообщение; HTTP-слой превращает их
в ответ вида {"code": ..., "message": ...}. Повторных попыток здесь нет:
мутации по возможности идемпотентны, клиент может повторить запрос сам.
"""


class DocCollabError(Exception):
    """Базовая ошибка DocCollab"""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str = "Internal error"):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class Unauthorized(DocCollabError):
    """Нет идентификации пользователя"""

    code = "UNAUTHORIZED"
    status_code = 401

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)


class NotFound(DocCollabError):
    """Документ, версия или папка отсутствует (или документ в корзине)"""

    code = "NOT_FOUND"
    status_code = 404


class Forbidden(DocCollabError):
    """Роли недостаточно для операции"""

    code = "FORBIDDEN"
    status_code = 403


class ValidationError(DocCollabError):
    """Некорректные входные данные"""

    code = "VALIDATION_ERROR"
    status_code = 422


class Conflict(DocCollabError):
    """Повторное создание уникальной записи"""

    code = "CONFLICT"
    status_code = 409
