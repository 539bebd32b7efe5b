# catalyst/main.py
import uvicorn

from catalyst.api import create_app
from catalyst.data.database import Base, SessionLocal, engine
from catalyst.data.models import KeyValueRecordModel  # noqa: F401  registers kv_records
from catalyst.data.seed import seed
from catalyst.repos.kv_repo import KeyValueRepo
from catalyst.repos.redis_repo import RedisKeyValueRepo
from catalyst.services.persistence import PersistenceSync
from catalyst.utils.logging import get_logger
from catalyst.utils.settings import STORE_BACKEND

logger = get_logger(__name__)


def init_store():
    Base.metadata.create_all(bind=engine)
    logger.info(f"Tables ready: {list(Base.metadata.tables.keys())}")

    if STORE_BACKEND == "redis":
        written = seed(PersistenceSync(RedisKeyValueRepo()))
    else:
        db = SessionLocal()
        try:
            written = seed(PersistenceSync(KeyValueRepo(db)))
        finally:
            db.close()
    if written:
        logger.info(f"Seeded initial data for {written}")


init_store()
app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
