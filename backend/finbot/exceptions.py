"""
Domain exceptions.

Each carries the HTTP status the API layer renders it with. Messages are
user-facing (the bot shows them verbatim), so they are written in Portuguese.
"""


class FinBotError(Exception):
    """Base class for expected, user-facing errors."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(FinBotError):
    status_code = 400


class NotFoundError(FinBotError):
    status_code = 404


class AlreadyExistsError(FinBotError):
    status_code = 400


class InsufficientFundsError(FinBotError):
    """Withdrawal larger than the savings box balance."""

    status_code = 400


class ParseError(Exception):
    """The AI oracle could not produce a usable transaction guess."""
