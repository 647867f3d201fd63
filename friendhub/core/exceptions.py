from enum import Enum


class ErrorKind(str, Enum):
    INVALID_ARGUMENT = "invalid_argument"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    ALREADY_RESOLVED = "already_resolved"
    CONFLICT = "conflict"
    UNAVAILABLE = "unavailable"


class FriendhubError(Exception):
    """
    Базовая ошибка сервиса.
    kind и status_code стабильны: клиент опирается на них, а не на текст.
    """
    kind: ErrorKind = ErrorKind.UNAVAILABLE
    status_code: int = 500
    default_message = "Ошибка сервиса"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "error": self.kind.value,
            "message": self.message,
            "status_code": self.status_code,
        }


class InvalidArgument(FriendhubError):
    kind = ErrorKind.INVALID_ARGUMENT
    status_code = 400
    default_message = "Параметры запроса некорректны"


class NotFound(FriendhubError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404
    default_message = "Не найдено"


class Forbidden(FriendhubError):
    kind = ErrorKind.FORBIDDEN
    status_code = 403
    default_message = "Нет доступа"


class AlreadyResolved(FriendhubError):
    kind = ErrorKind.ALREADY_RESOLVED
    status_code = 409
    default_message = "Заявка уже обработана"


class Conflict(FriendhubError):
    kind = ErrorKind.CONFLICT
    status_code = 409
    default_message = "Запись изменена параллельным запросом"


class Unavailable(FriendhubError):
    kind = ErrorKind.UNAVAILABLE
    status_code = 503
    default_message = "Хранилище недоступно"
