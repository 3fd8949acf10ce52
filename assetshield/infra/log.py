"""
Single logging entry point for the application.
"""

from assetshield.services.structured_logging import (
    configure_logging,
    get_logger,
    init_logging,
)

__all__ = ["configure_logging", "init_logging", "get_logger"]
