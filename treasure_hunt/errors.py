"""
Error taxonomy shared by the stores, the core and the API
"""


class HuntError(Exception):
    """Base error carrying the message shown to the participant"""
    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(HuntError):
    """Malformed participant input: locator, team name, group"""


class NotFoundError(HuntError):
    """The requested clue has no content for this team's group"""


class BlockedError(HuntError):
    """Requested position is ahead of the allowed position"""

    def __init__(self, required_position: int):
        super().__init__(f"You must solve Clue #{required_position} first.")
        self.required_position = required_position


class TransientError(HuntError):
    """Durable store read or write failed"""
    retryable = True


class ConflictError(Exception):
    """Duplicate key on insert; callers treat it as success"""
