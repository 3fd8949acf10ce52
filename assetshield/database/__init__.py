# -*- coding: utf-8 -*-
from assetshield.database.db import db

__all__ = ["db"]
