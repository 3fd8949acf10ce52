# -*- coding: utf-8 -*-
"""
WSGI entry point: ``gunicorn assetshield.main:app``.
"""
import os

from assetshield.factory import create_app

app = create_app()

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "5000")))
