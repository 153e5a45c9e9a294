import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.database import Base, engine
from app.routers import api_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

TAGS_METADATA = [
    {"name": "OTP", "description": "One-time codes emailed to the site owner. Required to delete blog posts."},
    {"name": "Blogs", "description": "Blog posts: list, read, create and update (admin key), delete (OTP)."},
    {"name": "Contact", "description": "Contact form relayed to the site owner's mailbox."},
]

API_DESCRIPTION = """
# Portfolio API

Backend of the portfolio site: blog posts and the contact form.

## Deleting a post

```
POST   /v1/otp                      → 6-digit code emailed to the owner (valid 5 minutes)
DELETE /v1/blogs/{id}  X-OTP: <code> → post deleted, code consumed
```

A code works once. Requesting a new code invalidates the previous one.
Failures answer `401` with `detail` set to `OTP_REQUIRED`, `INVALID_OR_EXPIRED_OTP` or `OTP_EXPIRED`.

## Creating and editing posts

`POST /v1/blogs` and `PUT /v1/blogs/{id}` require the `X-Admin-Key` header.
"""


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=API_DESCRIPTION,
    openapi_tags=TAGS_METADATA,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.API_V1_PREFIX)


@app.get("/health", tags=["Health"])
async def health():
    """Liveness probe."""
    return {"status": "ok"}
