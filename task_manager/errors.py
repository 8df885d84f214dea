"""Domain errors raised below the HTTP layer.

Repositories and services raise these; routers translate them into HTTP
responses. Nothing in this module knows about status codes.
"""


class TaskManagerError(Exception):
    """Base exception for task manager errors."""


class StorageError(TaskManagerError):
    """A relational backend fault (connection, query, constraint)."""


class DuplicateEmailError(StorageError):
    """Insert violated the unique constraint on users.email."""

    def __init__(self, email: str) -> None:
        super().__init__(f"email already registered: {email}")
        self.email = email


class OwnerNotFoundError(StorageError):
    """Task insert referenced a user id that does not exist."""

    def __init__(self, owner_id: str) -> None:
        super().__init__(f"owner does not exist: {owner_id}")
        self.owner_id = owner_id
