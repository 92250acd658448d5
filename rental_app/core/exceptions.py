from fastapi import HTTPException


class RentalError(HTTPException):
    status_code = 500
    code = "SERVER_ERROR"
    default_detail = "Something went wrong on our end."

    def __init__(self, detail: str | None = None):
        super().__init__(
            status_code=self.status_code, detail=detail or self.default_detail
        )


class ValidationError(RentalError):
    status_code = 400
    code = "VALIDATION_ERROR"
    default_detail = "Invalid request."


class AuthenticationError(RentalError):
    status_code = 401
    code = "NOT_AUTHENTICATED"
    default_detail = "Not authenticated."


class AuthorizationError(RentalError):
    status_code = 403
    code = "NOT_AUTHORIZED"
    default_detail = "You are not authorized to perform this action."


class NotFoundError(RentalError):
    status_code = 404
    code = "NOT_FOUND"
    default_detail = "Resource not found."


class ConflictError(RentalError):
    status_code = 409
    code = "CONFLICT"
    default_detail = "Resource conflict."


class InvalidStateError(RentalError):
    status_code = 400
    code = "INVALID_STATE"
    default_detail = "Invalid state transition."


class HouseNotAvailableError(InvalidStateError):
    code = "HOUSE_NOT_AVAILABLE"
    default_detail = "House is not available for rent."


class ServerError(RentalError):
    pass
