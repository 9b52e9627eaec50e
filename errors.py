# errors.py: exceptions métier, converties en réponses JSON {"message": ...} par app_factory.


class BloodBankError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class Unauthenticated(BloodBankError):
    status_code = 401
    message = "unauthorized access"


class InvalidCredential(Unauthenticated):
    """Jeton présent mais signature ou expiration invalide."""


class Forbidden(BloodBankError):
    status_code = 403
    message = "forbidden access"


class InvalidArgument(BloodBankError):
    status_code = 400
    message = "Invalid argument"


class InvalidTransition(InvalidArgument):
    message = "Invalid status transition"


class NotFound(BloodBankError):
    status_code = 404
    message = "Not found"


class Internal(BloodBankError):
    status_code = 500
    message = "Server error"
