"""Storage-agnostic repository contracts.

Routers depend only on these interfaces; the relational and in-memory
variants are interchangeable behind them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from task_manager.models import Task, User


@dataclass(frozen=True)
class UserDraft:
    """Fields supplied at registration; the store fills in the rest."""

    name: str
    email: str
    password_hash: str


class TaskRepository(ABC):
    """Task persistence scoped by owner.

    A task that belongs to another user is indistinguishable from one that
    does not exist.
    """

    @abstractmethod
    async def list_by_owner(self, owner_id: str) -> list[Task]:
        """Return every task owned by owner_id in insertion order."""

    @abstractmethod
    async def get_by_id_for_owner(self, owner_id: str, task_id: int) -> Task | None:
        """Return the task only when both id and owner match."""

    @abstractmethod
    async def create(self, task: Task) -> Task:
        """Persist a new task, assigning its id and timestamps.

        Raises:
            OwnerNotFoundError: task.user_id does not refer to a user
            StorageError: any other backend fault
        """

    @abstractmethod
    async def update(self, task: Task) -> bool:
        """Replace title, details, is_completed and due_date for (id, user_id).

        Returns:
            bool: False when no row matched
        """

    @abstractmethod
    async def delete_for_owner(self, owner_id: str, task_id: int) -> bool:
        """Remove the task identified by (id, owner).

        Returns:
            bool: False when nothing was removed; this is not an error
        """


class UserRepository(ABC):
    """User persistence keyed by id and by unique email."""

    @abstractmethod
    async def exists_by_email(self, email: str) -> bool:
        ...

    @abstractmethod
    async def insert(self, draft: UserDraft) -> User:
        """Persist a new user with token_version 0.

        Raises:
            DuplicateEmailError: the email is already registered
            StorageError: any other backend fault
        """

    @abstractmethod
    async def get_by_email(self, email: str) -> User | None:
        ...

    @abstractmethod
    async def get_by_id(self, user_id: str) -> User | None:
        ...

    @abstractmethod
    async def bump_token_version(self, user_id: str) -> int | None:
        """Increment token_version, invalidating every outstanding token.

        Returns:
            int | None: the new version, or None for an unknown user
        """
