"""
Kennel API - Record SQLAlchemy Model
======================================

What:  ORM model for the `records` table used by the database store.
How:   One table holds every collection; rows are partitioned by the
       `collection` column. The record itself is stored as a JSON document.

Table Design:
    - pk: autoincrement surrogate key, defines insertion order for find_all
    - collection + record_id: the public identity, unique together
    - data: the full record (including its id) as JSON

    Replace and merge update `data` in place, so a record keeps its pk and
    therefore its position in the listing.
"""

from typing import Any, Dict

from sqlalchemy import JSON, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from kennel.database import Base


class RecordRow(Base):
    """One stored record of one collection."""

    __tablename__ = "records"

    pk: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Surrogate key; ordering follows insertion",
    )

    collection: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Resource collection name, e.g. 'dogs'",
    )

    record_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Public record identifier, unique within its collection",
    )

    data: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        comment="Full record document",
    )

    __table_args__ = (
        UniqueConstraint("collection", "record_id", name="uq_records_collection_record_id"),
    )

    def __repr__(self) -> str:
        return f"<RecordRow(collection='{self.collection}', record_id='{self.record_id}')>"
