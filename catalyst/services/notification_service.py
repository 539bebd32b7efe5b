# catalyst/services/notification_service.py
from celery.exceptions import CeleryError
from kombu.exceptions import OperationalError as BrokerError
from redis.exceptions import RedisError

from catalyst.celery_worker import celery_app
from catalyst.domain.schemas import Order, Product
from catalyst.utils.logging import get_logger

logger = get_logger(__name__)

# what `.delay` raises when the broker cannot take the message
DISPATCH_ERRORS = (CeleryError, BrokerError, RedisError, OSError, RuntimeError)


class NotificationService:
    """
    Customer-facing notifications.
    Dispatched through Celery so checkout never waits on them.
    """

    @staticmethod
    def send_order_confirmation(order: Order):
        send_order_confirmation_task.delay(order.id, order.customer_email, order.total)

    @staticmethod
    def announce_new_product(product: Product):
        announce_new_product_task.delay(product.id, product.title)


@celery_app.task(name="catalyst.services.notification_service.send_order_confirmation_task")
def send_order_confirmation_task(order_id: str, customer_email: str, total: str):
    """
    Would send the download-link email for the purchased products.
    For now it only logs.
    """
    logger.info(f"[NOTIFICATION] {customer_email}: order {order_id} completed, total {total}")
    return {"order_id": order_id, "email": customer_email, "status": "sent"}


@celery_app.task(name="catalyst.services.notification_service.announce_new_product_task")
def announce_new_product_task(product_id: int, title: str):
    logger.info(f"[NOTIFICATION] New product {product_id}: {title!r}")
    return {"product_id": product_id, "status": "sent"}
