# catalyst/utils/logging.py
import logging
import sys

from catalyst.utils.settings import LOG_LEVEL

_ROOT = "catalyst"
_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _configure_root() -> logging.Logger:
    root = logging.getLogger(_ROOT)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
        root.setLevel(LOG_LEVEL)
    return root


def get_logger(name: str) -> logging.Logger:
    _configure_root()
    return logging.getLogger(name)
