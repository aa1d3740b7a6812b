"""
ASGI entrypoint: expose `app` for process managers / deployments.

- En production, un process manager (ex: gunicorn/uvicorn-workers) ou Vercel importe `concours.asgi:app`.
- Toute la configuration de FastAPI est centralisée dans concours.app_setup.factory.
"""

from concours.app import app

__all__ = ["app"]
