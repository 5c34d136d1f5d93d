import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.cache import cache
from app.config import settings
from app.errors import register_error_handlers
from app.middleware import TimingMiddleware
from app.routers import posts

VERSION = "1.0.0"

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup; the API serves straight from the database without Redis.
    await cache.connect()
    logger.info("Blog post API started (env=%s)", settings.APP_ENV)
    yield
    # Shutdown
    await cache.disconnect()

app = FastAPI(
    title="Blog Post API",
    description="Create, browse, edit and delete blog posts",
    version=VERSION,
    lifespan=lifespan,
)

# Middleware
app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Routers
app.include_router(posts.router)

@app.get("/health")
async def health():
    return {"status": "healthy", "version": VERSION, "cache": cache.stats}
