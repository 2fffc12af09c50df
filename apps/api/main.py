# apps/api/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from apps.api.routers import auth, enrollments, storage
from core.config import settings
from core.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging()
    if not settings.ADMIN_PWD_HASH:
        logger.warning("ADMIN_PWD_HASH not set; admin sign-in is disabled")
    logger.info("enrollment API up; authorized reviewer=%s", settings.ADMIN_EMAIL)
    yield


app = FastAPI(title="Enrollment Intake API", version="0.1.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(enrollments.router)
app.include_router(storage.router)


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}
