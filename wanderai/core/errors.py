class WanderAIError(Exception):
    """Base class for domain errors surfaced to the user as a notification."""

    message = "An unexpected error occurred."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class DuplicateUserError(WanderAIError):
    message = "User with this email already exists."


class UserNotFoundError(WanderAIError):
    message = "User not found. Please register."


class InvalidCredentialsError(WanderAIError):
    message = "Invalid email or password."


class IncorrectPasswordError(WanderAIError):
    message = "Incorrect current password."


class PersistenceUnavailableError(WanderAIError):
    message = "Cannot save itinerary: user email or storage context is missing."
