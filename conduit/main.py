import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from conduit.cache import cache
from conduit.config import settings
from conduit.errors import register_exception_handlers
from conduit.middleware import SecurityHeadersMiddleware, TimingMiddleware
from conduit.routers import articles, comments, profiles, tags, users

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("starting conduit (env=%s)", settings.APP_ENV)
    await cache.connect()
    yield
    # Shutdown
    await cache.disconnect()


app = FastAPI(
    title="Conduit API",
    description="Social blogging platform: articles, comments, tags, profiles, follows and favorites",
    version="1.0.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

# Middleware
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(users.router)
app.include_router(profiles.router)
app.include_router(articles.router)
app.include_router(comments.router)
app.include_router(tags.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
