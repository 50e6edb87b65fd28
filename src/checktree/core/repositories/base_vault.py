# ♥♥─── Generic Vault ────────────────────────────────────────────────────────────
from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any, TypeVar
from contextlib import contextmanager

from sqlmodel import Session, col, func, select
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from checktree.ui import icons
from checktree.core.models import CheckTreeSQLModel
from checktree.custom_logger import log
from checktree.core.exceptions import PersistenceError


if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine
T_Model = TypeVar("T_Model", bound=CheckTreeSQLModel)


def _engine_for(db_url: str, echo: bool) -> Engine:
    """Create an engine, sharing one connection for in-memory SQLite databases.

    :param db_url: The database connection URL.
    :param echo: If True, SQLAlchemy will log all generated SQL.
    :returns: The configured engine.
    """
    if db_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        if db_url in {"sqlite://", "sqlite:///:memory:"}:
            return create_engine(db_url, echo=echo, connect_args=connect_args, poolclass=StaticPool)
        return create_engine(db_url, echo=echo, connect_args=connect_args)
    return create_engine(db_url, echo=echo)


# ─── Base Vault ───────────────────────────────────────────────────────────────
class BaseVault:
    """Base class for vault implementations, providing common database operations.

    :param vault_name: The name of this vault instance.
    :param db_url: The database connection URL.
    :param echo: If True, SQLAlchemy will log all generated SQL.
    :ivar engine: The SQLAlchemy engine for database connections.
    :ivar vault_name: The name of this vault instance.
    """

    def __init__(self, vault_name: str, db_url: str, echo: bool = False) -> None:
        """Initialize the database engine and create tables if they don't exist."""
        self.engine: Engine = _engine_for(db_url, echo)
        self.vault_name: str = vault_name
        self._lock = threading.RLock()
        CheckTreeSQLModel.metadata.create_all(self.engine)
        log.debug("[i]{} vault[/i] initialized {} {}", vault_name, icons.DATABASE, db_url)

    @contextmanager
    def session_scope(self, operation: str, commit: bool = True) -> Iterator[Session]:
        """Open a session, committing on success and translating database errors.

        Sessions are serialized per vault; worker threads share one connection
        for in-memory databases.

        :param operation: Operation name reported in :class:`PersistenceError`.
        :param commit: Whether to commit when the block exits cleanly.
        :raises PersistenceError: If SQLAlchemy raises inside the block.
        """
        try:
            with self._lock, Session(self.engine, expire_on_commit=False) as session:
                yield session
                if commit:
                    session.commit()
        except SQLAlchemyError as e:
            log.error("{} vault: {} failed: {}", self.vault_name, operation, e)
            raise PersistenceError(str(e), operation=operation) from e

    def get_by_id(self, model_cls: type[T_Model], item_id: Any) -> T_Model | None:
        """Retrieve a single item by its primary key (id).

        :param model_cls: The SQLModel class to query.
        :param item_id: The ID of the item to retrieve.
        :returns: The found item or None if not found.
        """
        with self.session_scope("get", commit=False) as session:
            return session.get(model_cls, item_id)

    def exists(self, model_cls: type[T_Model], item_id: Any) -> bool:
        """Check if an item with the given primary key (id) exists.

        :param model_cls: The SQLModel class to query.
        :param item_id: The ID of the item to check for existence.
        :returns: True if the item exists, False otherwise.
        """
        with self.session_scope("exists", commit=False) as session:
            stmt = select(col(model_cls.id)).where(col(model_cls.id) == item_id)
            return session.exec(stmt).first() is not None

    def count(self, model_cls: type[T_Model]) -> int:
        """Return the total number of records for a model.

        :param model_cls: The SQLModel class to count.
        :returns: The total number of records.
        """
        with self.session_scope("count", commit=False) as session:
            return session.exec(select(func.count(col(model_cls.id)))).one()

    def dispose(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()
