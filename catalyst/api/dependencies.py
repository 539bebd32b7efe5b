# catalyst/api/dependencies.py
from fastapi import Depends, Response
from sqlalchemy.orm import Session

from catalyst.data.database import get_db
from catalyst.repos.kv_repo import KeyValueRepo
from catalyst.repos.redis_repo import RedisKeyValueRepo
from catalyst.services.notification_service import NotificationService
from catalyst.services.persistence import PersistenceSync
from catalyst.services.store_service import StoreService
from catalyst.utils.settings import STORE_BACKEND

STORAGE_WARNING_HEADER = "X-Storage-Warning"


def get_store_repo(db: Session = Depends(get_db)):
    if STORE_BACKEND == "redis":
        return RedisKeyValueRepo()
    return KeyValueRepo(db)


def get_service(repo=Depends(get_store_repo)) -> StoreService:
    return StoreService(PersistenceSync(repo), notifier=NotificationService())


def report_storage(response: Response, svc: StoreService):
    """Storage failures do not fail the request, they are flagged on the response."""
    if svc.storage_errors:
        response.headers[STORAGE_WARNING_HEADER] = ",".join(
            sorted({e.kind.value for e in svc.storage_errors})
        )
