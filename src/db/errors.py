# exceptions raised by the account and session layer
# every error carries a message that can be shown to the user as-is


class AccountError(Exception):
    message = "Something went wrong."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationError(AccountError):
    message = "Invalid input."


class DuplicateEmailError(AccountError):
    message = "Email already registered!"


class NotFoundError(AccountError):
    message = "Account not found. Please create an account."


class InvalidCredentialsError(AccountError):
    message = "Incorrect password!"


class PersistenceError(AccountError):
    """
    Storage read or write failed. Nothing in memory was changed,
    so the operation can be retried.
    """

    message = "Could not save your changes. Please try again."
