"""SQLAlchemy mapping metadata for the propsync domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from propsync.domain.model import CanonicalEntity, PropertyRecord, PropertyStatus, SyncCursor

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _enum_values(enum_cls: type[PropertyStatus]) -> list[str]:
    return [member.value for member in enum_cls]


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

canonical_entity_table = Table(
    "canonical_entity",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("name_key", String, nullable=False, unique=True),
    Column("contact_name", String, nullable=True),
    Column("contact_email", String, nullable=True),
    Column("phone_number", String, nullable=True),
    Column("jurisdictions", JSON, nullable=False, default=list),
    Column("created_at", UTCDateTime(), nullable=True),
    Column("updated_at", UTCDateTime(), nullable=True),
)

property_table = Table(
    "property",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("address", String, nullable=False),
    Column("city", String, nullable=False),
    Column("state", String(2), nullable=False),
    Column("zip_code", String(10), nullable=True),
    Column("county", String, nullable=True),
    Column("address_key", String, nullable=False),
    Column("latitude", Float, nullable=True),
    Column("longitude", Float, nullable=True),
    Column("property_type", String, nullable=True),
    Column("bedrooms", Integer, nullable=True),
    Column("bathrooms", Float, nullable=True),
    Column("square_feet", Integer, nullable=True),
    Column("year_built", Integer, nullable=True),
    Column("sale_price", Float, nullable=True),
    Column("sale_date", Date, nullable=True),
    Column("recording_date", Date, nullable=True),
    Column(
        "status",
        Enum(
            PropertyStatus,
            native_enum=False,
            values_callable=_enum_values,
            length=32,
        ),
        nullable=False,
        default=PropertyStatus.IN_RENOVATION,
    ),
    Column(
        "entity_id",
        UUIDColumnType,
        ForeignKey("canonical_entity.id", ondelete="SET NULL"),
        nullable=True,
    ),
    Column(
        "seller_entity_id",
        UUIDColumnType,
        ForeignKey("canonical_entity.id", ondelete="SET NULL"),
        nullable=True,
    ),
    Column("provider_property_id", String, nullable=True, unique=True),
    Column("provider_record_id", String, nullable=True, unique=True),
    Column("source_id", String, nullable=True),
    Column("created_at", UTCDateTime(), nullable=True),
    Column("updated_at", UTCDateTime(), nullable=True),
    Index("ix_property_address_key", "address_key"),
    Index("ix_property_entity_id", "entity_id"),
    Index("ix_property_seller_entity_id", "seller_entity_id"),
)

sync_cursor_table = Table(
    "sync_cursor",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("source_id", String, nullable=False, unique=True),
    Column("last_synced_date", Date, nullable=True),
    Column("total_records_synced", Integer, nullable=False, default=0),
    Column("last_sync_at", UTCDateTime(), nullable=True),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(CanonicalEntity, canonical_entity_table)
    mapper_registry.map_imperatively(PropertyRecord, property_table)
    mapper_registry.map_imperatively(SyncCursor, sync_cursor_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
