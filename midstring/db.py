from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint, create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, relationship, sessionmaker
from sqlalchemy.pool import StaticPool

from .core import keys_between, midpoint
from .errors import NotFound
from .models import Item, OrderedList, item_order
from .storage import check_version, neighbor_keys
from .utils import new_uuid, now_utc

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class ListRow(Base):
    __tablename__ = "lists"
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(140))
    version: Mapped[int] = mapped_column(Integer, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=now_utc)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    items: Mapped[list[ItemRow]] = relationship(back_populates="ordered_list", cascade="all, delete-orphan")


class ItemRow(Base):
    __tablename__ = "items"
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    list_id: Mapped[str] = mapped_column(String(36), ForeignKey("lists.id", ondelete="CASCADE"), index=True)
    label: Mapped[str] = mapped_column(String(200))
    sort_key: Mapped[str] = mapped_column(String(255), index=True)
    version: Mapped[int] = mapped_column(Integer, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=now_utc)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    ordered_list: Mapped[ListRow] = relationship(back_populates="items")

    __table_args__ = (
        UniqueConstraint("list_id", "sort_key", "id", name="uq_items_order"),
    )


def make_engine(url: str) -> Engine:
    if url in ("sqlite://", "sqlite:///:memory:"):
        # one shared connection, or each thread would see its own empty database
        return create_engine(url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    return create_engine(
        url,
        connect_args={"check_same_thread": False} if url.startswith("sqlite") else {},
    )


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)


def to_list(row: ListRow) -> OrderedList:
    return OrderedList(
        id=row.id,
        name=row.name,
        created_at=row.created_at,
        updated_at=row.updated_at,
        version=row.version,
    )


def to_item(row: ItemRow) -> Item:
    return Item(
        id=row.id,
        list_id=row.list_id,
        label=row.label,
        sort_key=row.sort_key,
        created_at=row.created_at,
        updated_at=row.updated_at,
        version=row.version,
    )


class SqlStorage:
    """SQLAlchemy-backed store with the same operations as ``Storage``.

    Each call runs in its own session and transaction.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self.SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
        init_db(engine)

    def _list_row(self, session: Session, list_id: str, lock: bool = False) -> ListRow:
        row = session.get(ListRow, list_id, with_for_update=lock)
        if row is None:
            raise NotFound("list", list_id)
        return row

    def _item_rows(self, session: Session, list_id: str) -> dict[str, ItemRow]:
        rows = session.scalars(select(ItemRow).where(ItemRow.list_id == list_id))
        return {row.id: row for row in rows}

    @staticmethod
    def _touch(row: ListRow) -> None:
        row.version += 1
        row.updated_at = now_utc()

    # === List operations ===
    def create_list(self, name: str) -> OrderedList:
        with self.SessionLocal.begin() as session:
            now = now_utc()
            row = ListRow(id=new_uuid(), name=name.strip(), version=1, created_at=now, updated_at=now)
            session.add(row)
            session.flush()
            return to_list(row)

    def list_lists(self) -> List[OrderedList]:
        with self.SessionLocal() as session:
            rows = session.scalars(select(ListRow).order_by(ListRow.created_at, ListRow.id))
            return [to_list(r) for r in rows]

    def get_list(self, list_id: str) -> OrderedList:
        with self.SessionLocal() as session:
            return to_list(self._list_row(session, list_id))

    def rename_list(self, list_id: str, name: str, expected_version: Optional[int] = None) -> OrderedList:
        with self.SessionLocal.begin() as session:
            row = self._list_row(session, list_id, lock=True)
            check_version("list", list_id, expected_version, row.version)
            row.name = name.strip()
            self._touch(row)
            session.flush()
            return to_list(row)

    def delete_list(self, list_id: str, expected_version: Optional[int] = None) -> None:
        with self.SessionLocal.begin() as session:
            row = self._list_row(session, list_id, lock=True)
            check_version("list", list_id, expected_version, row.version)
            session.delete(row)

    # === Item operations ===
    def list_items(self, list_id: str) -> List[Item]:
        with self.SessionLocal() as session:
            self._list_row(session, list_id)
            items = [to_item(r) for r in self._item_rows(session, list_id).values()]
        # sorted here rather than by ORDER BY so the database collation plays no part
        return sorted(items, key=item_order)

    def get_item(self, list_id: str, item_id: str) -> Item:
        with self.SessionLocal() as session:
            self._list_row(session, list_id)
            row = session.get(ItemRow, item_id)
            if row is None or row.list_id != list_id:
                raise NotFound("item", item_id)
            return to_item(row)

    def create_item(
        self,
        list_id: str,
        label: str,
        after_id: Optional[str] = None,
        before_id: Optional[str] = None,
    ) -> Item:
        return self.create_items(list_id, [label], after_id, before_id)[0]

    def create_items(
        self,
        list_id: str,
        labels: List[str],
        after_id: Optional[str] = None,
        before_id: Optional[str] = None,
    ) -> List[Item]:
        with self.SessionLocal.begin() as session:
            lst = self._list_row(session, list_id)
            current = {k: to_item(r) for k, r in self._item_rows(session, list_id).items()}
            low, high = neighbor_keys(current, after_id, before_id)
            now = now_utc()
            rows = [
                ItemRow(
                    id=new_uuid(),
                    list_id=list_id,
                    label=label.strip(),
                    sort_key=key,
                    version=1,
                    created_at=now,
                    updated_at=now,
                )
                for label, key in zip(labels, keys_between(low, high, len(labels)))
            ]
            session.add_all(rows)
            self._touch(lst)
            session.flush()
            logger.debug("list %s: %d item(s) keyed between %r and %r", list_id, len(rows), low, high)
            return [to_item(r) for r in rows]

    def move_item(
        self,
        list_id: str,
        item_id: str,
        after_id: Optional[str] = None,
        before_id: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> Item:
        with self.SessionLocal.begin() as session:
            lst = self._list_row(session, list_id, lock=True)
            rows = self._item_rows(session, list_id)
            row = rows.pop(item_id, None)
            if row is None:
                raise NotFound("item", item_id)
            check_version("item", item_id, expected_version, row.version)
            low, high = neighbor_keys({k: to_item(r) for k, r in rows.items()}, after_id, before_id)
            row.sort_key = midpoint(low, high)
            row.version += 1
            row.updated_at = now_utc()
            self._touch(lst)
            session.flush()
            logger.debug("list %s: item %s re-keyed to %r", list_id, item_id, row.sort_key)
            return to_item(row)

    def delete_item(self, list_id: str, item_id: str) -> None:
        with self.SessionLocal.begin() as session:
            lst = self._list_row(session, list_id)
            row = session.get(ItemRow, item_id)
            if row is None or row.list_id != list_id:
                raise NotFound("item", item_id)
            session.delete(row)
            self._touch(lst)
