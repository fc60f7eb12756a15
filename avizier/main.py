import logging

from fastapi import FastAPI

from .api import statements
from .config import Base, engine, settings
from .core.errors import register_exception_handlers
from .core.logging import configure_logging
from .models import models as _all_models  # noqa: F401
from .schemas.schemas import HealthRead

logger = logging.getLogger(__name__)

configure_logging(settings.log_level.upper(), json_logs=settings.json_logs)

app = FastAPI(title="Avizier - maintenance fee statements")
register_exception_handlers(app)


@app.on_event("startup")
def startup() -> None:
    # Tables are created in place; the schema belongs to the hosting application.
    Base.metadata.create_all(bind=engine)
    logger.info("Avizier statement service started")


@app.get("/health", response_model=HealthRead, tags=["system"])
def health() -> HealthRead:
    return HealthRead(status="ok")


app.include_router(statements.router, tags=["statements"])
