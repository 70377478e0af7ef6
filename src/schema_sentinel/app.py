"""
Schema Sentinel Admin API
==========================
    uvicorn schema_sentinel.app:app

The module-level ``app`` is built from environment configuration. Embedding
applications and tests call ``create_app(sentinel)`` with their own instance.
"""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from schema_sentinel.core.config import SentinelConfig
from schema_sentinel.routers import schemas
from schema_sentinel.services.sentinel import Sentinel

logger = logging.getLogger("schema_sentinel")


def create_app(sentinel: Optional[Sentinel] = None) -> FastAPI:
    if sentinel is None:
        sentinel = Sentinel.from_config(SentinelConfig.from_env())

    app = FastAPI(title="Schema Sentinel")
    app.state.sentinel = sentinel

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(schemas.router)

    @app.get("/health")
    def health():
        return {"status": "ok", "tracked": len(app.state.sentinel.store.all())}

    logger.info(f"✅ Schema Sentinel ready ({sentinel.config.store_driver} store)")
    return app


def __getattr__(name: str):
    # Build the env-configured app only when a server asks for it, then keep
    # it as a real module attribute so later lookups bypass this hook
    if name == "app":
        logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(levelname)s] %(message)s')
        app = globals()["app"] = create_app()
        return app
    raise AttributeError(name)
