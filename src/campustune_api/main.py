from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from campustune_api.api.errors import install_error_handlers
from campustune_api.api.routers.checkout import router as checkout_router
from campustune_api.api.routers.health import router as health_router
from campustune_api.api.routers.supports import router as supports_router
from campustune_api.api.routers.webhooks import router as webhooks_router
from campustune_api.domain.checkout import StripeCheckoutClient
from campustune_api.observability.logging import access_log, configure_logging
from campustune_api.observability.metrics import render_metrics
from campustune_api.observability.middleware import RequestContextMiddleware
from campustune_api.observability.tracing import configure_tracing
from campustune_api.settings import get_settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger = logging.getLogger("campustune_api.main")
    client = StripeCheckoutClient.from_settings(get_settings())
    if client is None:
        logger.warning("Stripe checkout is not configured; tip checkout is disabled")
    app.state.checkout_provider = client
    try:
        yield
    finally:
        app.state.checkout_provider = None
        if client is not None:
            await client.aclose()


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging()
    logger = logging.getLogger("campustune_api.main")
    app = FastAPI(title="CampusTune Payments API", version="0.1.0", lifespan=lifespan)
    app.state.checkout_provider = None

    # AnyHttpUrl adds a trailing slash; browser Origin headers never carry one.
    cors_origins = [str(o).rstrip("/") for o in settings.api_cors_origins]
    logger.info(f"Configuring CORS with allowed origins: {cors_origins}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware, access_log=access_log)
    install_error_handlers(app)

    # No body-parsing middleware is installed; the webhook route reads raw bytes.
    app.include_router(health_router)
    app.include_router(webhooks_router)
    app.include_router(supports_router)
    app.include_router(checkout_router)

    app.add_api_route(
        "/metrics", render_metrics, methods=["GET"], include_in_schema=False
    )

    configure_tracing(app)
    return app


app = create_app()
