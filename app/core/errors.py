"""Error taxonomy shared by services and the HTTP layer.

Services raise these; ``app.main`` renders them as ``{"message": ...}`` JSON
with the class's status code.
"""


class AppError(Exception):
    status_code = 500
    default_message = "Erro interno do servidor"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def payload(self) -> dict:
        return {"message": self.message}


class ValidationError(AppError):
    """Malformed, missing or out-of-domain input."""

    status_code = 400
    default_message = "Dados inválidos"

    def __init__(self, message: str | None = None, errors: list[dict] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []

    def payload(self) -> dict:
        return {"message": self.message, "errors": self.errors}

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(errors=[{"field": field, "message": message}])


class ConflictError(AppError):
    status_code = 409
    default_message = "Horário indisponível"


class SlotUnavailableError(ConflictError):
    """The requested (date, time) already has a confirmed booking."""

    default_message = "Este horário já está ocupado. Escolha outro horário."

    def payload(self) -> dict:
        return {"available": False, "message": self.message}


class UnauthenticatedError(AppError):
    status_code = 401
    default_message = "Acesso negado. Faça login como administrador."


class InvalidCredentialsError(UnauthenticatedError):
    default_message = "Credenciais inválidas"


class ForbiddenError(AppError):
    status_code = 403
    default_message = "Operação não permitida"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Agendamento não encontrado"


class StorageError(AppError):
    """Underlying store failure. The original exception is chained, never shown to clients."""

    status_code = 500
