"""FastAPI application."""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dynaforms.config import EngineSettings
from dynaforms.api.endpoints import create_forms_router
from dynaforms.validation import (
    AsyncFormValidator,
    AsyncValidatorRegistry,
    FormValidator,
    ValidatorRegistry,
    load_validator_modules,
)

logger = logging.getLogger(__name__)


# Global instances (initialized on startup)
settings: EngineSettings | None = None
form_validator: FormValidator | None = None
async_validator: AsyncFormValidator | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build registries and validators on startup."""
    global settings, form_validator, async_validator

    settings = EngineSettings.from_env()
    logging.basicConfig(level=settings.log_level)

    registry = ValidatorRegistry()
    async_registry = AsyncValidatorRegistry()
    load_validator_modules(settings.validator_modules, registry, async_registry)
    logger.info(
        "Registered %d custom and %d async validator(s)",
        len(registry),
        len(async_registry),
    )
    if not settings.fail_open:
        logger.info("Fail-open disabled: unregistered validators fail their rule")

    form_validator = FormValidator(registry, settings)
    async_validator = AsyncFormValidator(async_registry, settings)

    yield

    form_validator = None
    async_validator = None


app = FastAPI(title="dynaforms API", lifespan=lifespan)

# CORS for frontend dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(
    create_forms_router(
        get_form_validator=lambda: form_validator,
        get_async_validator=lambda: async_validator,
    )
)


@app.get("/api/health")
async def health() -> dict[str, Any]:
    """Liveness probe."""
    return {"status": "ok"}
