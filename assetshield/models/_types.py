# -*- coding: utf-8 -*-
# generic JSON that works on SQLite & Postgres; Python None is stored as SQL NULL
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import JSON as SA_JSON

JSONType = SA_JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")


def iso(value):
    return value.isoformat() if value else None
