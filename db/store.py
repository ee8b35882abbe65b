"""
Payment record store.

Owns every persisted PaymentRecord. Writes are plain inserts: there is no
deduplication or upsert, so redelivered captures produce additional rows.
"""

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from db.models import PaymentRecord

log = structlog.get_logger(__name__)


class PersistenceError(Exception):
    pass


class PaymentRecordStore:
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def save(self, record: PaymentRecord) -> PaymentRecord:
        """Insert a record. Raises PersistenceError if the write fails."""
        with self.session_factory() as session:
            try:
                session.add(record)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                raise PersistenceError(str(e)) from e
        log.debug("store.saved", record_id=record.id, order_id=record.order_id)
        return record

    def list_all(self) -> list[PaymentRecord]:
        """Return every record in whatever order the database yields them."""
        try:
            with self.session_factory() as session:
                return list(session.scalars(select(PaymentRecord)).all())
        except SQLAlchemyError as e:
            raise PersistenceError(str(e)) from e
