"""
ASGI entrypoint: expose `app` for process managers / deployments.

- En production, un process manager (ex: gunicorn -k uvicorn.workers.UvicornWorker) importe
  `storefront.asgi:app` pour servir l'application FastAPI.
- Toute la configuration est centralisée dans storefront.app_setup.factory.create_app.
"""

from storefront.app_setup.factory import create_app

app = create_app()
