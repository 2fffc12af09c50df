from __future__ import annotations

import os

from pydantic import BaseModel


class Settings(BaseModel):
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-change-me")
    ACCESS_TOKEN_EXPIRE_MIN: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MIN", "60"))
    ANON_TOKEN_EXPIRE_MIN: int = int(os.getenv("ANON_TOKEN_EXPIRE_MIN", "720"))

    # single authorized reviewer; reads of the enrollments collection are limited to it
    ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "admin@questo.com")
    ADMIN_PWD_HASH: str | None = os.getenv("ADMIN_PWD_HASH")

    ALLOWED_MIME: set[str] = {
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
    }
    MAX_UPLOAD_MB: int = int(os.getenv("MAX_UPLOAD_MB", "10"))

    CORS_ALLOW_ORIGINS: list[str] = os.getenv("CORS_ALLOW_ORIGINS", "http://localhost:8501").split(
        ","
    )

    MONGO_URL: str = os.getenv("MONGO_URL", "mongodb://mongo:27017")
    MONGO_DB: str = os.getenv("MONGO_DB", "enrollment")

    STORAGE_ROOT: str = os.getenv("STORAGE_ROOT", "/data/blobs")
    PUBLIC_BASE_URL: str = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000")

    # used by the Streamlit client to reach the backend
    API_BASE_URL: str = os.getenv("API_BASE_URL", "http://localhost:8000")
    HTTP_TIMEOUT_S: float = float(os.getenv("HTTP_TIMEOUT_S", "60"))


settings = Settings()
