"""In-memory repository variant used by tests and local experiments.

Both repositories share one InMemoryStore so task inserts can check that
the owner exists, mirroring the foreign key in the relational schema.
Stored rows are never handed out directly; callers always get copies.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TypeVar

from task_manager.errors import DuplicateEmailError, OwnerNotFoundError
from task_manager.models import Task, User
from task_manager.models.user import new_user_id
from task_manager.repositories.base import TaskRepository, UserDraft, UserRepository

RowT = TypeVar("RowT", Task, User)


def _copy(row: RowT) -> RowT:
    return type(row)(**{column.key: getattr(row, column.key) for column in row.__table__.columns})


@dataclass
class InMemoryStore:
    users: dict[str, User] = field(default_factory=dict)
    tasks: dict[int, Task] = field(default_factory=dict)
    next_task_id: int = 1
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class InMemoryTaskRepository(TaskRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def list_by_owner(self, owner_id: str) -> list[Task]:
        async with self.store.lock:
            return [
                _copy(task)
                for _, task in sorted(self.store.tasks.items())
                if task.user_id == owner_id
            ]

    async def get_by_id_for_owner(self, owner_id: str, task_id: int) -> Task | None:
        async with self.store.lock:
            task = self.store.tasks.get(task_id)
            if task is None or task.user_id != owner_id:
                return None
            return _copy(task)

    async def create(self, task: Task) -> Task:
        async with self.store.lock:
            if task.user_id not in self.store.users:
                raise OwnerNotFoundError(task.user_id)
            now = datetime.now(UTC)
            task.id = self.store.next_task_id
            self.store.next_task_id += 1
            if task.is_completed is None:
                task.is_completed = False
            task.created_at = now
            task.updated_at = now
            self.store.tasks[task.id] = _copy(task)
            return task

    async def update(self, task: Task) -> bool:
        async with self.store.lock:
            stored = self.store.tasks.get(task.id)
            if stored is None or stored.user_id != task.user_id:
                return False
            task.updated_at = datetime.now(UTC)
            stored.title = task.title
            stored.details = task.details
            stored.is_completed = task.is_completed
            stored.due_date = task.due_date
            stored.updated_at = task.updated_at
            return True

    async def delete_for_owner(self, owner_id: str, task_id: int) -> bool:
        async with self.store.lock:
            stored = self.store.tasks.get(task_id)
            if stored is None or stored.user_id != owner_id:
                return False
            del self.store.tasks[task_id]
            return True


class InMemoryUserRepository(UserRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def exists_by_email(self, email: str) -> bool:
        async with self.store.lock:
            return any(user.email == email for user in self.store.users.values())

    async def insert(self, draft: UserDraft) -> User:
        async with self.store.lock:
            if any(user.email == draft.email for user in self.store.users.values()):
                raise DuplicateEmailError(draft.email)
            now = datetime.now(UTC)
            user = User(
                id=new_user_id(),
                name=draft.name,
                email=draft.email,
                password_hash=draft.password_hash,
                token_version=0,
                created_at=now,
                updated_at=now,
            )
            self.store.users[user.id] = user
            return _copy(user)

    async def get_by_email(self, email: str) -> User | None:
        async with self.store.lock:
            for user in self.store.users.values():
                if user.email == email:
                    return _copy(user)
            return None

    async def get_by_id(self, user_id: str) -> User | None:
        async with self.store.lock:
            user = self.store.users.get(user_id)
            return _copy(user) if user is not None else None

    async def bump_token_version(self, user_id: str) -> int | None:
        async with self.store.lock:
            user = self.store.users.get(user_id)
            if user is None:
                return None
            user.token_version += 1
            user.updated_at = datetime.now(UTC)
            return user.token_version
