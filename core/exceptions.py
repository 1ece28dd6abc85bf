from abc import ABC


class BaseCustomException(Exception, ABC):
    """
    Base class for all custom exceptions.
    """

    def __init__(self, message: str | None = None):
        self.message = message or self.get_default_message()
        super().__init__(self.message)

    def get_default_message(self) -> str:
        """
        Return default error message.

        Returns
        -------
        str
            Default error message
        """
        return "error.unknown"

    def get_status_code(self) -> int:
        """
        Return HTTP status code for exception.

        Returns
        -------
        int
            HTTP status code
        """
        return 500


class BadRequestException(BaseCustomException):
    """Bad request exception (400)."""

    def get_status_code(self) -> int:
        return 400


class NotFoundException(BaseCustomException):
    """Not found exception (404)."""

    def get_status_code(self) -> int:
        return 404


class TokenNotSupportedException(NotFoundException):
    """Token symbol is not in the registry."""

    def get_default_message(self) -> str:
        return "error.token.not_supported"


class InvalidAddressException(BadRequestException):
    """Invalid address exception."""

    def get_default_message(self) -> str:
        return "error.address.invalid"


class InvalidAmountException(BadRequestException):
    """Amount cannot be represented in token units."""

    def get_default_message(self) -> str:
        return "error.amount.invalid"


class RPCException(BaseCustomException):
    """RPC error exception."""

    def get_default_message(self) -> str:
        return "error.rpc.failed"

    def get_status_code(self) -> int:
        return 502


class EventsFetchException(BaseCustomException):
    """Whole event cycle failed."""

    def get_default_message(self) -> str:
        return "Failed to fetch events"


class InsufficientFundsException(BadRequestException):
    """Transfer amount exceeds the sender balance."""

    def get_default_message(self) -> str:
        return "error.amount.insufficient_funds"
