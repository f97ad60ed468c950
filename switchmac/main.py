"""FastAPI application entry-point."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from switchmac import __version__
from switchmac.routers import collect, health
from switchmac.utils.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown hooks."""
    setup_logging()
    yield


app = FastAPI(
    title="Switch MAC Collector",
    description="Collects MAC address tables from a fleet of switches",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(collect.router)
