"""Relational repository variant backed by an SQLAlchemy AsyncSession.

Each write commits immediately, so every operation is its own transaction.
"""

from datetime import UTC, datetime

from sqlalchemy import delete, exists, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from task_manager.errors import DuplicateEmailError, OwnerNotFoundError, StorageError
from task_manager.logger import get_logger
from task_manager.models import Task, User
from task_manager.models.user import new_user_id
from task_manager.repositories.base import TaskRepository, UserDraft, UserRepository

logger = get_logger(__name__)


async def _storage_fault(db: AsyncSession, operation: str, exc: SQLAlchemyError) -> StorageError:
    await db.rollback()
    logger.error(
        "Storage operation failed",
        operation=operation,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return StorageError(f"{operation} failed")


class SqlTaskRepository(TaskRepository):
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_by_owner(self, owner_id: str) -> list[Task]:
        try:
            result = await self.db.execute(
                select(Task).where(Task.user_id == owner_id).order_by(Task.id)
            )
        except SQLAlchemyError as exc:
            raise await _storage_fault(self.db, "list_tasks", exc) from exc
        return list(result.scalars().all())

    async def get_by_id_for_owner(self, owner_id: str, task_id: int) -> Task | None:
        try:
            result = await self.db.execute(
                select(Task).where(Task.id == task_id, Task.user_id == owner_id)
            )
        except SQLAlchemyError as exc:
            raise await _storage_fault(self.db, "get_task", exc) from exc
        return result.scalar_one_or_none()

    async def create(self, task: Task) -> Task:
        self.db.add(task)
        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            # Title and flags are validated upstream; the FK is the only constraint left.
            raise OwnerNotFoundError(task.user_id) from exc
        except SQLAlchemyError as exc:
            raise await _storage_fault(self.db, "create_task", exc) from exc
        await self.db.refresh(task)
        return task

    async def update(self, task: Task) -> bool:
        task.updated_at = datetime.now(UTC)
        stmt = (
            update(Task)
            .where(Task.id == task.id, Task.user_id == task.user_id)
            .values(
                title=task.title,
                details=task.details,
                is_completed=task.is_completed,
                due_date=task.due_date,
                updated_at=task.updated_at,
            )
        )
        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as exc:
            raise await _storage_fault(self.db, "update_task", exc) from exc
        return result.rowcount > 0

    async def delete_for_owner(self, owner_id: str, task_id: int) -> bool:
        stmt = delete(Task).where(Task.id == task_id, Task.user_id == owner_id)
        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as exc:
            raise await _storage_fault(self.db, "delete_task", exc) from exc
        return result.rowcount > 0


class SqlUserRepository(UserRepository):
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def exists_by_email(self, email: str) -> bool:
        try:
            result = await self.db.execute(select(exists().where(User.email == email)))
        except SQLAlchemyError as exc:
            raise await _storage_fault(self.db, "check_email", exc) from exc
        return bool(result.scalar())

    async def insert(self, draft: UserDraft) -> User:
        user = User(
            id=new_user_id(),
            name=draft.name,
            email=draft.email,
            password_hash=draft.password_hash,
            token_version=0,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as exc:
            # Another request registered the same email between check and insert
            await self.db.rollback()
            raise DuplicateEmailError(draft.email) from exc
        except SQLAlchemyError as exc:
            raise await _storage_fault(self.db, "insert_user", exc) from exc
        await self.db.refresh(user)
        return user

    async def get_by_email(self, email: str) -> User | None:
        try:
            result = await self.db.execute(select(User).where(User.email == email))
        except SQLAlchemyError as exc:
            raise await _storage_fault(self.db, "get_user_by_email", exc) from exc
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: str) -> User | None:
        try:
            result = await self.db.execute(select(User).where(User.id == user_id))
        except SQLAlchemyError as exc:
            raise await _storage_fault(self.db, "get_user", exc) from exc
        return result.scalar_one_or_none()

    async def bump_token_version(self, user_id: str) -> int | None:
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(token_version=User.token_version + 1, updated_at=datetime.now(UTC))
            .returning(User.token_version)
        )
        try:
            result = await self.db.execute(stmt)
            new_version = result.scalar_one_or_none()
            await self.db.commit()
        except SQLAlchemyError as exc:
            raise await _storage_fault(self.db, "bump_token_version", exc) from exc
        return new_version
