from typing import Dict, Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from catalyst.data.models.record import KeyValueRecordModel
from catalyst.domain.errors import StorageError, StorageErrorKind
from catalyst.utils.settings import STORE_QUOTA_BYTES


def _is_disk_full(e: OperationalError) -> bool:
    return "full" in str(e.orig).lower()


class KeyValueRepo:
    """Flat key -> JSON text map in a single SQL table, with a byte quota over all keys."""

    def __init__(self, db: Session, quota_bytes: int = STORE_QUOTA_BYTES):
        self.db = db
        self.quota_bytes = quota_bytes

    def get(self, key: str) -> Optional[str]:
        try:
            record = self.db.get(KeyValueRecordModel, key)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(StorageErrorKind.UNAVAILABLE, key, str(e))
        return record.value if record else None

    def used_bytes(self, exclude_keys: Iterable[str] = ()) -> int:
        stmt = select(func.coalesce(func.sum(KeyValueRecordModel.size), 0))
        exclude_keys = list(exclude_keys)
        if exclude_keys:
            stmt = stmt.where(KeyValueRecordModel.key.notin_(exclude_keys))
        return int(self.db.execute(stmt).scalar_one())

    def set(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def set_many(self, values: Dict[str, str]) -> None:
        """Write every key in one transaction: all rows are stored or none are."""
        keys = list(values)
        sizes = {key: len(value.encode("utf-8")) for key, value in values.items()}
        try:
            total = sum(sizes.values())
            if self.used_bytes(exclude_keys=keys) + total > self.quota_bytes:
                raise StorageError(
                    StorageErrorKind.QUOTA_EXCEEDED,
                    keys,
                    f"{total} bytes would exceed the {self.quota_bytes} byte quota",
                )

            for key, value in values.items():
                record = self.db.get(KeyValueRecordModel, key)
                if record:
                    record.value = value
                    record.size = sizes[key]
                else:
                    self.db.add(KeyValueRecordModel(key=key, value=value, size=sizes[key]))
            self.db.commit()
        except OperationalError as e:
            self.db.rollback()
            kind = StorageErrorKind.QUOTA_EXCEEDED if _is_disk_full(e) else StorageErrorKind.UNAVAILABLE
            raise StorageError(kind, keys, str(e.orig))
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(StorageErrorKind.UNAVAILABLE, keys, str(e))
