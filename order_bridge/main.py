import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool

from order_bridge import __version__
from order_bridge.broker import BrokerChannel
from order_bridge.config import Settings, load_settings
from order_bridge.routers.health import router as health_router
from order_bridge.routers.orders import router as orders_router

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(settings: Optional[Settings] = None, broker: Optional[BrokerChannel] = None) -> FastAPI:
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await run_in_threadpool(app.state.broker.close)

    app = FastAPI(title="Order Queue Bridge", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.broker = broker or BrokerChannel(settings)

    app.include_router(health_router)
    app.include_router(orders_router)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    return app


def main():
    settings = load_settings()
    configure_logging(settings.log_level)
    if not settings.rabbitmq_url:
        logger.warning("RABBITMQ_URL is not set, POST /orders will fail until it is configured")

    app = create_app(settings)
    logger.info(f"Order service listening on port {settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
