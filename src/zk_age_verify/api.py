"""
HTTP transport for the verification pipeline.

Two thin entry points forward a raw identity number to the pipeline and
return its ``VerificationResult``:

- ``POST /api/kyc/verify`` with a JSON body ``{"aadhaar": "..."}``
- ``/api/graphql`` exposing the ``verifyAge(aadhaar: String!)`` mutation

Neither echoes the request body or exception detail back to the caller or
into the log.
"""

import json
from typing import List, Optional

import strawberry
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from graphql import GraphQLError
from strawberry.extensions import MaskErrors
from strawberry.fastapi import GraphQLRouter
from strawberry.types import ExecutionContext, Info

from .constants import (
    MSG_AADHAAR_REQUIRED,
    MSG_GRAPHQL_STATUS,
    MSG_INTERNAL_ERROR,
    MSG_INVALID_BODY,
)
from .data_models import ErrorKind, VerificationResult
from .pipeline import AgeVerificationPipeline, get_default_pipeline

# Initialize structured logger
logger = structlog.get_logger(__name__)


def _error_response(message: str, status_code: int) -> JSONResponse:
    if status_code < 500:
        logger.info("Request rejected", error_kind=ErrorKind.TRANSPORT.value, reason=message)
    return JSONResponse(VerificationResult.failed(message).to_dict(), status_code=status_code)


@strawberry.type(name="VerificationResult")
class VerificationResultType:
    success: bool
    is_adult: Optional[bool] = None
    message: Optional[str] = None

    @classmethod
    def from_result(cls, result: VerificationResult) -> "VerificationResultType":
        return cls(success=result.success, is_adult=result.is_adult, message=result.message)


@strawberry.type
class Query:
    @strawberry.field
    def status(self) -> str:
        return MSG_GRAPHQL_STATUS


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def verify_age(self, info: Info, aadhaar: str) -> VerificationResultType:
        pipeline: AgeVerificationPipeline = info.context["pipeline"]
        try:
            result = await pipeline.verify_age(aadhaar)
        except Exception as e:
            logger.error("Unhandled resolver fault", field="verifyAge", error_type=type(e).__name__)
            result = VerificationResult.failed(MSG_INTERNAL_ERROR)
        return VerificationResultType.from_result(result)


class VerificationSchema(strawberry.Schema):
    """Schema whose error reporting never carries exception text."""

    def process_errors(
        self,
        errors: List[GraphQLError],
        execution_context: Optional[ExecutionContext] = None,
    ) -> None:
        for error in errors:
            # Messages and tracebacks may echo the identity number
            original = getattr(error, "original_error", None) or error
            logger.error("GraphQL execution fault", error_type=type(original).__name__)


schema = VerificationSchema(
    query=Query,
    mutation=Mutation,
    extensions=[MaskErrors(error_message=MSG_INTERNAL_ERROR)],
)


def create_app(pipeline: Optional[AgeVerificationPipeline] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Parameters
    ----------
    pipeline : Optional[AgeVerificationPipeline], default=None
        Pipeline serving both endpoints. Defaults to the configured one.

    Returns
    -------
    FastAPI
        Application with the JSON, GraphQL and health routes mounted.
    """
    active_pipeline = pipeline or get_default_pipeline()
    app = FastAPI(title="zk-age-verify", docs_url=None, redoc_url=None)

    @app.exception_handler(Exception)
    async def _internal_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled request fault", path=request.url.path, error_type=type(exc).__name__)
        return _error_response(MSG_INTERNAL_ERROR, 500)

    @app.get("/health")
    async def health() -> dict:
        return {"ok": True}

    @app.post("/api/kyc/verify")
    async def verify(request: Request) -> JSONResponse:
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return _error_response(MSG_INVALID_BODY, 400)

        if not isinstance(body, dict):
            return _error_response(MSG_INVALID_BODY, 400)

        aadhaar = body.get("aadhaar")
        if not aadhaar or not isinstance(aadhaar, str):
            return _error_response(MSG_AADHAAR_REQUIRED, 400)

        result = await active_pipeline.verify_age(aadhaar)
        return JSONResponse(result.to_dict(), status_code=200 if result.success else 400)

    async def graphql_context() -> dict:
        return {"pipeline": active_pipeline}

    app.include_router(
        GraphQLRouter(schema, context_getter=graphql_context),
        prefix="/api/graphql",
    )

    return app
