# src/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import Gauge
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.middleware.base import BaseHTTPMiddleware

from src.api import api_router
from src.config import settings
from src.upload.service import get_upload_service

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Release the storage client's connection pool on shutdown
    await get_upload_service().storage.close()


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

Instrumentator().instrument(app).expose(
    app,
    endpoint="/metrics",
    include_in_schema=False,
)

# Track in-flight requests (concurrent uploads)
INPROGRESS = Gauge("inprogress_requests", "In-progress HTTP requests")


class InflightMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        INPROGRESS.inc()
        try:
            response = await call_next(request)
            return response
        finally:
            INPROGRESS.dec()


# Add early so it wraps all following middlewares/routers
app.add_middleware(InflightMiddleware)

app.include_router(api_router)

origins = settings.CORS_ORIGINS.split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)


@app.get("/")
async def read_root():
    return {"msg": f"Welcome to {settings.PROJECT_NAME}!"}


@app.get("/health-check")
async def health_check():
    return {"status": "healthy"}
