"""FastAPI app factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from grapesight import __version__
from grapesight.config import settings
from grapesight.dependencies import shutdown_orchestrator

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.grapesight_log_level.upper(), logging.DEBUG),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await shutdown_orchestrator()


def create_app() -> FastAPI:
    app = FastAPI(
        title="GrapeSight",
        description="Grape leaf disease classification with a staged CNN walkthrough",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from grapesight.api.router import api_router

    app.include_router(api_router)

    return app


app = create_app()
