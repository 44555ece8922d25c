"""Form validation API endpoints."""

from typing import Any, Callable

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from dynaforms.forms import FormConfig, check_form_config
from dynaforms.validation import AsyncFormValidator, AsyncValidatorError, FormValidator


class ValidateRequest(BaseModel):
    """Request body for full-form validation."""
    config: dict[str, Any]
    data: dict[str, Any] = {}


class ValidateFieldRequest(BaseModel):
    """Request body for single-field validation."""
    config: dict[str, Any]
    field: str
    value: Any = None
    data: dict[str, Any] | None = None


class LintRequest(BaseModel):
    config: dict[str, Any]


def _parse_config(raw: dict[str, Any]) -> FormConfig:
    """Decode a request's config, rejecting structurally invalid ones with 400."""
    check = check_form_config(raw)
    if not check.valid or check.config is None:
        raise HTTPException(
            400,
            detail={
                "message": "Invalid form configuration",
                "issues": [i.to_dict() for i in check.issues],
            },
        )
    return check.config


def create_forms_router(
    get_form_validator: Callable[[], FormValidator | None],
    get_async_validator: Callable[[], AsyncFormValidator | None],
) -> APIRouter:
    """Create the form validation router with injected dependencies."""
    router = APIRouter(prefix="/api", tags=["forms"])

    def _form_validator() -> FormValidator:
        validator = get_form_validator()
        if not validator:
            raise HTTPException(500, "Form validator not initialized")
        return validator

    def _async_validator() -> AsyncFormValidator:
        validator = get_async_validator()
        if not validator:
            raise HTTPException(500, "Async validator not initialized")
        return validator

    @router.post("/forms/validate")
    async def validate_form(request: ValidateRequest) -> dict[str, Any]:
        """Validate a full submission against its form config."""
        config = _parse_config(request.config)
        return _form_validator().validate(config, request.data).to_dict()

    @router.post("/forms/validate-async")
    async def validate_form_async(request: ValidateRequest) -> dict[str, Any]:
        """Run every bound async validator for a submission."""
        config = _parse_config(request.config)
        try:
            result = await _async_validator().validate(config, request.data)
        except AsyncValidatorError as e:
            raise HTTPException(
                502,
                detail={
                    "message": str(e),
                    "field": e.field,
                    "validatorName": e.validator_name,
                },
            )
        return result.to_dict()

    @router.post("/forms/validate-field")
    async def validate_field(request: ValidateFieldRequest) -> dict[str, Any]:
        """Validate one field's value, e.g. on blur."""
        config = _parse_config(request.config)
        field = config.get_field(request.field)
        if not field:
            raise HTTPException(404, f"Field not found: {request.field}")

        result = _form_validator().validate_field_value(field, request.value, request.data)
        return result.to_dict()

    @router.post("/forms/lint")
    async def lint_form(request: LintRequest) -> dict[str, Any]:
        """Structurally check a form config without validating any data."""
        return check_form_config(request.config).to_dict()

    @router.get("/validators")
    async def list_validators() -> dict[str, Any]:
        """List the registered custom and async validator names."""
        return {
            "validators": sorted(_form_validator().registry.list()),
            "asyncValidators": sorted(_async_validator().registry.list()),
        }

    return router
