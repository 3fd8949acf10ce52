"""
Unified entry points for core services.

- Database (db)
- Logging (configure_logging, init_logging, get_logger)

Route decorators live in ``assetshield.infra.auth``; they load models, so
import them from there.
"""

from assetshield.infra.db import db
from assetshield.infra.log import configure_logging, get_logger, init_logging

__all__ = [
    "db",
    "configure_logging",
    "init_logging",
    "get_logger",
]
