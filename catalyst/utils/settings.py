# catalyst/utils/settings.py
import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./catalyst.db")
STORE_BACKEND = os.getenv("STORE_BACKEND", "sql")
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
STORE_QUOTA_BYTES = int(os.getenv("STORE_QUOTA_BYTES", 5 * 1024 * 1024))

CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/1")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/2")
CELERY_TASK_ALWAYS_EAGER = os.getenv("CELERY_TASK_ALWAYS_EAGER", "false").lower() == "true"

CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "₹")
FREE_PRODUCT_FEE = os.getenv("FREE_PRODUCT_FEE", "3")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
