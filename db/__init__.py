from db.models import Base, PaymentRecord
from db.store import PaymentRecordStore, PersistenceError

__all__ = ["Base", "PaymentRecord", "PaymentRecordStore", "PersistenceError"]
