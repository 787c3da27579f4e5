"""SQLAlchemy storage adapter: three tables mirroring the catalog entities."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Dict, List, Sequence

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    LargeBinary,
    String,
    Text,
    delete,
    event,
    or_,
    select,
    update,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from productdb.graph.models import (
    IdentificationHelper,
    Node,
    NodeCategory,
    ProductType,
    Relationship,
    RelationshipCategory,
)
from productdb.graph.storage.base import BackendFailure, CatalogStorage, RecordNotFound, RelationshipEndpoints

logger = logging.getLogger(__name__)

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NodeRecord(Base):
    """`nodes` table."""

    __tablename__ = "nodes"

    id = Column(String(36), primary_key=True)
    category = Column(String(32), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    parent_id = Column(String(36), ForeignKey("nodes.id", ondelete="CASCADE"), nullable=True, index=True)
    family_id = Column(String(36), ForeignKey("nodes.id", ondelete="SET NULL"), nullable=True, index=True)
    product_type = Column(String(16), nullable=True)
    released_at = Column(Date, nullable=True)
    is_latest_version = Column(Boolean, nullable=False, default=False)
    successor_id = Column(String(36), ForeignKey("nodes.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    def __repr__(self):
        return f"<NodeRecord(id={self.id}, category='{self.category}', name='{self.name}')>"


class RelationshipRecord(Base):
    """`relationships` table."""

    __tablename__ = "relationships"

    id = Column(String(36), primary_key=True)
    category = Column(String(32), nullable=False)
    source_node_id = Column(String(36), ForeignKey("nodes.id", ondelete="CASCADE"), nullable=False)
    target_node_id = Column(String(36), ForeignKey("nodes.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (Index("ix_relationships_source_category", "source_node_id", "category"),)


class IdentificationHelperRecord(Base):
    """`identification_helpers` table."""

    __tablename__ = "identification_helpers"

    id = Column(String(36), primary_key=True)
    node_id = Column(String(36), ForeignKey("nodes.id", ondelete="CASCADE"), nullable=False, index=True)
    category = Column(String(64), nullable=False)
    # `metadata` is reserved on declarative classes
    metadata_ = Column("metadata", LargeBinary, nullable=False, default=b"")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _to_node(record: NodeRecord) -> Node:
    return Node(
        id=record.id,
        category=NodeCategory(record.category),
        name=record.name,
        description=record.description or "",
        parent_id=record.parent_id,
        family_id=record.family_id,
        product_type=ProductType(record.product_type) if record.product_type else None,
        released_at=record.released_at,
        is_latest_version=bool(record.is_latest_version),
        successor_id=record.successor_id,
    )


def _node_columns(node: Node) -> Dict[str, object]:
    return {
        "category": node.category.value,
        "name": node.name,
        "description": node.description,
        "parent_id": node.parent_id,
        "family_id": node.family_id,
        "product_type": node.product_type.value if node.product_type else None,
        "released_at": node.released_at,
        "is_latest_version": node.is_latest_version,
        "successor_id": node.successor_id,
    }


def _to_relationship(record: RelationshipRecord) -> Relationship:
    return Relationship(
        id=record.id,
        category=RelationshipCategory(record.category),
        source_node_id=record.source_node_id,
        target_node_id=record.target_node_id,
    )


def _to_helper(record: IdentificationHelperRecord) -> IdentificationHelper:
    return IdentificationHelper(
        id=record.id,
        node_id=record.node_id,
        category=record.category,
        metadata=bytes(record.metadata_ or b""),
    )


class SQLStorage(CatalogStorage):
    """Relational storage through SQLAlchemy's asyncio extension."""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self._session_factory = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)

    @classmethod
    def from_url(cls, url: str, *, echo: bool = False) -> "SQLStorage":
        engine = create_async_engine(url, echo=echo, pool_pre_ping=True)
        if engine.dialect.name == "sqlite":
            event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        logger.info("SQL storage engine created", extra={"dialect": engine.dialect.name})
        return cls(engine)

    async def create_schema(self) -> None:
        async with self.engine.begin() as connection:
            await connection.run_sync(Base.metadata.create_all)
        logger.info("Catalog schema ensured")

    async def close(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        """Session with automatic commit, rollback on failure and close."""

        session = self._session_factory()
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.error("Database transaction failed", extra={"error": str(exc)})
            raise BackendFailure(str(exc)) from exc
        except BaseException:
            await session.rollback()
            raise
        finally:
            await session.close()

    # -- nodes -----------------------------------------------------------

    async def create_node(self, node: Node) -> Node:
        async with self._session() as session:
            session.add(NodeRecord(id=node.id, **_node_columns(node)))
        return node

    async def update_node(self, node: Node) -> Node:
        async with self._session() as session:
            record = await session.get(NodeRecord, node.id)
            if record is None:
                raise RecordNotFound(f"Node {node.id} does not exist")
            for column, value in _node_columns(node).items():
                setattr(record, column, value)
        return node

    async def delete_node(self, node_id: str) -> None:
        async with self._session() as session:
            if await session.get(NodeRecord, node_id) is None:
                raise RecordNotFound(f"Node {node_id} does not exist")

            doomed = [node_id]
            frontier = [node_id]
            while frontier:
                result = await session.execute(select(NodeRecord.id).where(NodeRecord.parent_id.in_(frontier)))
                frontier = list(result.scalars())
                doomed.extend(frontier)

            await session.execute(
                delete(IdentificationHelperRecord).where(IdentificationHelperRecord.node_id.in_(doomed))
            )
            await session.execute(
                delete(RelationshipRecord).where(
                    or_(RelationshipRecord.source_node_id.in_(doomed), RelationshipRecord.target_node_id.in_(doomed))
                )
            )
            await session.execute(update(NodeRecord).where(NodeRecord.family_id.in_(doomed)).values(family_id=None))
            await session.execute(
                update(NodeRecord).where(NodeRecord.successor_id.in_(doomed)).values(successor_id=None)
            )
            # children first so the self-referencing foreign key never dangles
            for doomed_id in reversed(doomed):
                await session.execute(delete(NodeRecord).where(NodeRecord.id == doomed_id))

        logger.debug("Deleted node subtree", extra={"node_id": node_id, "removed": len(doomed)})

    async def nodes_by_category(self, category: NodeCategory) -> List[Node]:
        async with self._session() as session:
            result = await session.execute(
                select(NodeRecord).where(NodeRecord.category == category.value).order_by(NodeRecord.created_at)
            )
            return [_to_node(record) for record in result.scalars()]

    async def nodes_by_ids(self, node_ids: Sequence[str]) -> List[Node]:
        wanted = list(dict.fromkeys(node_ids))
        if not wanted:
            return []
        async with self._session() as session:
            result = await session.execute(select(NodeRecord).where(NodeRecord.id.in_(wanted)))
            found = {record.id: _to_node(record) for record in result.scalars()}
        return [found[node_id] for node_id in wanted if node_id in found]

    # -- relationships ---------------------------------------------------

    async def create_relationship(self, relationship: Relationship) -> Relationship:
        async with self._session() as session:
            session.add(
                RelationshipRecord(
                    id=relationship.id,
                    category=relationship.category.value,
                    source_node_id=relationship.source_node_id,
                    target_node_id=relationship.target_node_id,
                )
            )
        return relationship

    async def update_relationship(self, relationship: Relationship) -> Relationship:
        async with self._session() as session:
            record = await session.get(RelationshipRecord, relationship.id)
            if record is None:
                raise RecordNotFound(f"Relationship {relationship.id} does not exist")
            record.category = relationship.category.value
            record.source_node_id = relationship.source_node_id
            record.target_node_id = relationship.target_node_id
        return relationship

    async def delete_relationship(self, relationship_id: str) -> None:
        async with self._session() as session:
            result = await session.execute(delete(RelationshipRecord).where(RelationshipRecord.id == relationship_id))
            if result.rowcount == 0:
                raise RecordNotFound(f"Relationship {relationship_id} does not exist")

    async def get_relationship(self, relationship_id: str) -> RelationshipEndpoints:
        async with self._session() as session:
            record = await session.get(RelationshipRecord, relationship_id)
            if record is None:
                raise RecordNotFound(f"Relationship {relationship_id} does not exist")
            source = await session.get(NodeRecord, record.source_node_id)
            target = await session.get(NodeRecord, record.target_node_id)
            if source is None or target is None:
                raise BackendFailure(f"Relationship {relationship_id} has a dangling endpoint")
            return RelationshipEndpoints(
                relationship=_to_relationship(record),
                source_node=_to_node(source),
                target_node=_to_node(target),
            )

    async def rels_by_source_and_category(
        self, source_id: str, category: RelationshipCategory
    ) -> List[Relationship]:
        async with self._session() as session:
            result = await session.execute(
                select(RelationshipRecord)
                .where(RelationshipRecord.source_node_id == source_id, RelationshipRecord.category == category.value)
                .order_by(RelationshipRecord.created_at)
            )
            return [_to_relationship(record) for record in result.scalars()]

    async def delete_rels_by_source_and_category(self, source_id: str, category: RelationshipCategory) -> int:
        async with self._session() as session:
            result = await session.execute(
                delete(RelationshipRecord).where(
                    RelationshipRecord.source_node_id == source_id, RelationshipRecord.category == category.value
                )
            )
            return result.rowcount or 0

    # -- identification helpers -----------------------------------------

    async def create_identification_helper(self, helper: IdentificationHelper) -> IdentificationHelper:
        async with self._session() as session:
            session.add(
                IdentificationHelperRecord(
                    id=helper.id,
                    node_id=helper.node_id,
                    category=helper.category,
                    metadata_=helper.metadata,
                )
            )
        return helper

    async def get_identification_helper(self, helper_id: str) -> IdentificationHelper:
        async with self._session() as session:
            record = await session.get(IdentificationHelperRecord, helper_id)
            if record is None:
                raise RecordNotFound(f"Identification helper {helper_id} does not exist")
            return _to_helper(record)

    async def update_identification_helper(self, helper: IdentificationHelper) -> IdentificationHelper:
        async with self._session() as session:
            record = await session.get(IdentificationHelperRecord, helper.id)
            if record is None:
                raise RecordNotFound(f"Identification helper {helper.id} does not exist")
            record.node_id = helper.node_id
            record.category = helper.category
            record.metadata_ = helper.metadata
        return helper

    async def delete_identification_helper(self, helper_id: str) -> None:
        async with self._session() as session:
            result = await session.execute(
                delete(IdentificationHelperRecord).where(IdentificationHelperRecord.id == helper_id)
            )
            if result.rowcount == 0:
                raise RecordNotFound(f"Identification helper {helper_id} does not exist")

    async def helpers_by_node(self, node_id: str) -> List[IdentificationHelper]:
        async with self._session() as session:
            result = await session.execute(
                select(IdentificationHelperRecord)
                .where(IdentificationHelperRecord.node_id == node_id)
                .order_by(IdentificationHelperRecord.created_at)
            )
            return [_to_helper(record) for record in result.scalars()]

    # -- preload primitives ----------------------------------------------

    async def _fetch_children(self, node_ids: Sequence[str]) -> List[Node]:
        async with self._session() as session:
            result = await session.execute(
                select(NodeRecord).where(NodeRecord.parent_id.in_(list(node_ids))).order_by(NodeRecord.created_at)
            )
            return [_to_node(record) for record in result.scalars()]

    async def _fetch_predecessors(self, node_ids: Sequence[str]) -> List[Node]:
        async with self._session() as session:
            result = await session.execute(select(NodeRecord).where(NodeRecord.successor_id.in_(list(node_ids))))
            return [_to_node(record) for record in result.scalars()]

    async def _fetch_relationships(self, node_ids: Sequence[str], *, outgoing: bool) -> List[Relationship]:
        column = RelationshipRecord.source_node_id if outgoing else RelationshipRecord.target_node_id
        async with self._session() as session:
            result = await session.execute(
                select(RelationshipRecord).where(column.in_(list(node_ids))).order_by(RelationshipRecord.created_at)
            )
            return [_to_relationship(record) for record in result.scalars()]
