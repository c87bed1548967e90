"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- Initialise FastAPILimiter (Redis) avec options de test (fakeredis).
- Signale au démarrage les secrets Stripe absents (le checkout répondra 500).
- Variables d'environnement supportées:
  - DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1: désactive complètement (tests)
  - USE_FAKE_REDIS_FOR_TESTS=1: utilise fakeredis (tests)
  - LOCAL_RATE_LIMIT_FALLBACK=1: active un fallback local si l'init échoue
"""
import os
import logging
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("uvicorn.error")
    settings = app.state.settings

    logger.info("Catalog backend: %s", settings.catalog_backend)
    if not settings.stripe_configured:
        logger.warning("STRIPE_SECRET_KEY manquant: le checkout répondra 500")
    if not settings.webhook_configured:
        logger.warning("STRIPE_WEBHOOK_SECRET manquant: le webhook répondra 500")
    if settings.settlement_ledger:
        logger.info("Settlement ledger enabled (redeliveries are ignored)")

    if os.getenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS") == "1":
        app.state.rate_limit_enabled = False
        logger.info("Rate limiting disabled by DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS")
        yield
        return

    limiter_ready = False
    try:
        if os.getenv("USE_FAKE_REDIS_FOR_TESTS") == "1":
            from fakeredis import FakeAsyncRedis
            r = FakeAsyncRedis(decode_responses=True)
        else:
            r = aioredis.from_url(settings.rate_limit_redis_url, encoding="utf-8", decode_responses=True)

        await FastAPILimiter.init(r)
        limiter_ready = True
        app.state.rate_limit_enabled = True
        logger.info("Rate limiting enabled")
    except Exception as e:
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            app.state.rate_limit_enabled = False
            logger.warning("Rate limiting falling back to local in-memory due to init error: %s", e)
        else:
            app.state.rate_limit_enabled = False
            logger.warning("Rate limiting disabled due to init error: %s", e)

    yield

    if limiter_ready:
        await FastAPILimiter.close()
