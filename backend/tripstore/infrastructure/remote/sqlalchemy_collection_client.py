"""Remote collection client backed by a SQL database through SQLAlchemy."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tripstore.application.interfaces import RemoteCollectionClient
from tripstore.domain.entities import SERVER_OWNED_FIELDS, Record
from tripstore.domain.exceptions import RecordNotFoundError, RemoteError, RemoteUnavailableError
from tripstore.infrastructure.database.models import CollectionRecordModel

logger = logging.getLogger(__name__)


def _isoformat(value: datetime | None) -> str | None:
    if value is None:
        return None
    # SQLite hands back naive datetimes; they were stored as UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


class SQLAlchemyCollectionClient(RemoteCollectionClient):
    """Implements the remote table port on the ``collection_records`` table.

    Every call runs in its own session and transaction, the way a request to
    a hosted table service would.
    """

    def __init__(self, collection: str, session_factory: async_sessionmaker[AsyncSession]):
        super().__init__(collection)
        self._session_factory = session_factory

    @staticmethod
    def _to_record(model: CollectionRecordModel) -> Record:
        """Map ORM model → flat record."""
        return {
            "id": model.id,
            **(model.data or {}),
            "created_at": _isoformat(model.created_at),
            "updated_at": _isoformat(model.updated_at),
        }

    @staticmethod
    def _split(record: Record) -> Record:
        return {k: v for k, v in record.items() if k != "id" and k not in SERVER_OWNED_FIELDS}

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    yield session
        except (OperationalError, InterfaceError) as exc:
            raise RemoteUnavailableError(self.collection, str(exc.orig or exc)) from exc
        except OSError as exc:
            raise RemoteUnavailableError(self.collection, str(exc)) from exc
        except IntegrityError as exc:
            raise RemoteError(self.collection, str(exc.orig or exc), status_code=409) from exc
        except SQLAlchemyError as exc:
            raise RemoteError(self.collection, str(exc)) from exc

    async def _get_model(self, session: AsyncSession, record_id: str) -> CollectionRecordModel | None:
        stmt = select(CollectionRecordModel).where(
            CollectionRecordModel.collection == self.collection,
            CollectionRecordModel.id == record_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_records(self) -> list[Record]:
        async with self._session() as session:
            stmt = (
                select(CollectionRecordModel)
                .where(CollectionRecordModel.collection == self.collection)
                .order_by(CollectionRecordModel.created_at.desc(), CollectionRecordModel.pk.desc())
            )
            result = await session.execute(stmt)
            return [self._to_record(row) for row in result.scalars().all()]

    async def insert(self, record: Record) -> Record:
        record_id = record.get("id")
        if not record_id:
            raise RemoteError(self.collection, "record has no id", status_code=400)
        async with self._session() as session:
            model = CollectionRecordModel(
                collection=self.collection,
                id=str(record_id),
                data=self._split(record),
            )
            session.add(model)
            await session.flush()
            created = self._to_record(model)
        logger.debug("Inserted %s/%s", self.collection, record_id)
        return created

    async def update(self, record_id: str, changes: Record) -> Record:
        async with self._session() as session:
            model = await self._get_model(session, record_id)
            if model is None:
                raise RecordNotFoundError(self.collection, record_id)
            # reassign so the JSON column is flagged dirty
            model.data = {**(model.data or {}), **self._split(changes)}
            model.updated_at = datetime.now(timezone.utc)
            await session.flush()
            await session.refresh(model)
            updated = self._to_record(model)
        logger.debug("Updated %s/%s", self.collection, record_id)
        return updated

    async def remove(self, record_id: str) -> None:
        async with self._session() as session:
            stmt = delete(CollectionRecordModel).where(
                CollectionRecordModel.collection == self.collection,
                CollectionRecordModel.id == record_id,
            )
            await session.execute(stmt)
        logger.debug("Removed %s/%s", self.collection, record_id)
