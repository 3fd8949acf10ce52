"""
Single database entry point. Models and services import ``db`` from here.
"""

from assetshield.database import db

__all__ = ["db"]
