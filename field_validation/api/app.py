"""
Admin HTTP API for field validation rules.

Exposes the rules read endpoint used by the schema rule loader, the
schema-save ingestion endpoint, object validation for the host's save
pipeline, and health/metrics endpoints.
"""

from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from field_validation.core.models import ConfigurationError
from field_validation.core.schema import collect_rules_from_layout, parse_layout
from field_validation.enforcement import (
    ObjectValidator,
    format_aggregate_message,
    merge_validation_messages,
)
from field_validation.observability.logger import get_logger
from field_validation.observability.metrics import generate_metrics, get_content_type
from field_validation.warehouse.rule_store import InMemoryRuleStore, PersistenceError, RuleStore

logger = get_logger(__name__)

API_PREFIX = "/admin/field-validation"


# =============================================================================
# Request Models
# =============================================================================

class SchemaSaveRequest(BaseModel):
    """Schema editor save payload: the layout tree, as an object or JSON text."""
    configuration: dict[str, Any] | str = Field(..., description="Schema layout tree")


class ObjectValidationRequest(BaseModel):
    """Field values of an object instance about to be saved."""
    schema_id: str = Field(..., alias="schemaId", min_length=1)
    field_values: dict[str, Any] = Field(default_factory=dict, alias="fieldValues")
    omit_mandatory_check: bool = Field(False, alias="omitMandatoryCheck")
    existing_messages: list[str] = Field(default_factory=list, alias="existingMessages")

    class Config:
        populate_by_name = True


# =============================================================================
# Application Factory
# =============================================================================

def create_app(store: RuleStore | InMemoryRuleStore) -> FastAPI:
    """
    Build the API around a rule store.

    Args:
        store: Store backing every endpoint

    Returns:
        FastAPI application
    """
    app = FastAPI(
        title="Field Validation Rules",
        description="Per-field validation rules for content-object schemas",
        version="0.1.0",
    )
    app.state.store = store
    app.state.started_at = datetime.now(timezone.utc)
    object_validator = ObjectValidator(store)

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(request: Request, exc: ConfigurationError):
        logger.warning(f"Rejected request to {request.url.path}: {exc}")
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": str(exc), "field": exc.field_name},
        )

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError):
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Rule storage failed; previous rules are unchanged"},
        )

    @app.get("/health")
    def health() -> dict[str, Any]:
        uptime = (datetime.now(timezone.utc) - app.state.started_at).total_seconds()
        return {"status": "healthy", "uptime_seconds": round(uptime, 3)}

    @app.get("/metrics")
    def metrics() -> Response:
        return Response(content=generate_metrics(), media_type=get_content_type())

    @app.get(f"{API_PREFIX}/rules")
    def get_rules(schemaId: str = "", classId: str = ""):
        schema_id = (schemaId or classId).strip()
        if not schema_id:
            return JSONResponse(
                status_code=400,
                content={"success": False, "message": "Missing classId"},
            )

        rules = store.get_rules_for_schema(schema_id)
        return {
            "success": True,
            "rules": {field_name: config.to_payload() for field_name, config in rules.items()},
        }

    @app.post(f"{API_PREFIX}/schemas/{{schema_id}}")
    def save_schema_rules(schema_id: str, request: SchemaSaveRequest):
        layout = parse_layout(request.configuration)
        rules = collect_rules_from_layout(layout)

        store.replace_rules_for_schema(schema_id, rules)

        warnings = []
        for field_name, config in rules.items():
            pattern_error = config.pattern_error()
            if pattern_error:
                warnings.append(f"{field_name}: regex does not compile ({pattern_error})")
        if warnings:
            logger.warning(
                f"Schema {schema_id} saved with invalid regex rules",
                extra={"schema_id": schema_id, "warnings": warnings},
            )

        return {"success": True, "stored": len(rules), "warnings": warnings}

    @app.post(f"{API_PREFIX}/objects/validate")
    def validate_object(request: ObjectValidationRequest):
        failures = object_validator.validate_object(
            request.schema_id,
            request.field_values,
            request.omit_mandatory_check,
        )
        messages = merge_validation_messages(request.existing_messages, failures)
        return {
            "success": not messages,
            "failures": [failure.model_dump(by_alias=True) for failure in failures],
            "messages": messages,
            "message": format_aggregate_message(messages),
        }

    return app
