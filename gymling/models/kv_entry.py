# gymling/models/kv_entry.py
from datetime import datetime
from typing import Any

from .. import db


class KeyValueEntry(db.Model):
    __tablename__ = "kv_entries"
    __table_args__ = (db.UniqueConstraint("user_id", "key", name="uq_kv_entries_user_key"),)

    id = db.Column(db.BigInteger().with_variant(db.Integer, "sqlite"), primary_key=True)
    user_id = db.Column(db.BigInteger, db.ForeignKey("users.id"), nullable=False, index=True)
    key = db.Column(db.String(64), nullable=False)
    value = db.Column(db.JSON)
    updated_at = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    user = db.relationship("User", backref="kv_entries")


class SqlKeyValueStore:
    """
    Per-user get/set over kv_entries.

    set() only stages the row on db.session; the request handler owns
    the commit (or rollback), so one request is one read-modify-write.
    """

    def __init__(self, user_id: int):
        self.user_id = user_id

    def _entry(self, key: str):
        return KeyValueEntry.query.filter_by(user_id=self.user_id, key=key).first()

    def get(self, key: str) -> Any:
        entry = self._entry(key)
        return entry.value if entry else None

    def set(self, key: str, value: Any) -> None:
        entry = self._entry(key)
        if entry is None:
            entry = KeyValueEntry(user_id=self.user_id, key=key)
            db.session.add(entry)
        entry.value = value
        entry.updated_at = datetime.utcnow()
        db.session.flush()

