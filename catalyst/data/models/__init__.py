# import models so SQLAlchemy registers them on Base.metadata

from catalyst.data.models.record import KeyValueRecordModel

__all__ = ["KeyValueRecordModel"]
