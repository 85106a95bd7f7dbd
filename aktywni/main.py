import logging
from contextlib import asynccontextmanager
from urllib.parse import urlparse

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from aktywni.api.exception_handlers import register_exception_handlers
from aktywni.api.router import api_router
from aktywni.core.config import settings
from aktywni.db.base import engine
from aktywni.db.startup import connect_with_retry

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: wait for the database (bounded retries, fixed delay).

    If the database never comes up, the exception aborts startup and the
    server process exits.
    """
    connect_with_retry(
        engine,
        max_retries=settings.db_connect_max_retries,
        delay_seconds=settings.db_connect_retry_delay_seconds,
    )
    yield
    engine.dispose()


app = FastAPI(title="Aktywni.pl API", lifespan=lifespan)

if settings.frontend_url:
    parsed = urlparse(settings.frontend_url)
    origin = f"{parsed.scheme}://{parsed.netloc}"
    allow_origins = [origin]
    allow_credentials = True
else:
    allow_origins = ["*"]
    allow_credentials = False

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)
app.include_router(api_router, prefix="/api")
