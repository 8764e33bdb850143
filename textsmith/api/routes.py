"""HTTP route handlers for the rewrite API."""

from __future__ import annotations

from typing import Any, Dict, List, Type

import orjson
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from textsmith.config import Settings, get_settings
from textsmith.engine.errors import TextEngineError
from textsmith.engine.models import AnalysisResult, ResponseEnvelope, TransformResult
from textsmith.profiles.loader import get_profile_registry
from textsmith.profiles.models import ProfileSummary
from textsmith.service import get_service

from .schemas import (
    AnalyzeRequestModel,
    AnalyzeResponseModel,
    BatchRequestModel,
    HistoryResponseModel,
    ProvenanceModel,
    TransformRequestModel,
    TransformResponseModel,
    UndoActionModel,
    UndoResponseModel,
)


router = APIRouter()

STATUS_FOR_ERROR_CODE = {
    "invalid_request": status.HTTP_400_BAD_REQUEST,
    "capability_denied": status.HTTP_403_FORBIDDEN,
    "cancelled": status.HTTP_409_CONFLICT,
    "timeout": status.HTTP_504_GATEWAY_TIMEOUT,
    "internal_error": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _error(code: str, details: str) -> HTTPException:
    return HTTPException(
        status_code=STATUS_FOR_ERROR_CODE.get(
            code, status.HTTP_500_INTERNAL_SERVER_ERROR
        ),
        detail={"error": code, "details": details},
    )


async def _read_json_body(http_request: Request, settings: Settings) -> Any:
    header_length = http_request.headers.get("content-length")
    if header_length:
        try:
            content_length = int(header_length)
        except ValueError:
            content_length = None
        else:
            if (
                content_length is not None
                and content_length > settings.max_payload_bytes
            ):
                raise HTTPException(
                    status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    detail={
                        "error": "payload_too_large",
                        "limit_bytes": settings.max_payload_bytes,
                    },
                )

    body_bytes = await http_request.body()
    if body_bytes and len(body_bytes) > settings.max_payload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail={
                "error": "payload_too_large",
                "limit_bytes": settings.max_payload_bytes,
            },
        )

    if not body_bytes:
        return {}
    try:
        return orjson.loads(body_bytes)
    except orjson.JSONDecodeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_json", "details": str(exc)},
        ) from exc


async def _load_request_model(
    http_request: Request, model_cls: Type[BaseModel], settings: Settings
) -> BaseModel:
    data = await _read_json_body(http_request, settings)
    try:
        return model_cls.model_validate(data)
    except ValidationError as exc:
        raise RequestValidationError(
            exc.errors(include_url=False, include_context=False)
        ) from exc


async def load_transform_request(http_request: Request) -> TransformRequestModel:
    settings = get_settings()
    return await _load_request_model(http_request, TransformRequestModel, settings)


async def load_analyze_request(http_request: Request) -> AnalyzeRequestModel:
    settings = get_settings()
    return await _load_request_model(http_request, AnalyzeRequestModel, settings)


async def load_batch_request(http_request: Request) -> BatchRequestModel:
    settings = get_settings()
    return await _load_request_model(http_request, BatchRequestModel, settings)


def _raise_for_envelope(envelope: ResponseEnvelope) -> None:
    if not envelope.ok:
        raise _error(envelope.error_code or "internal_error", envelope.error or "")


@router.post("/v1/transform", response_model=TransformResponseModel)
async def transform(
    transform_request: TransformRequestModel = Depends(load_transform_request),
):
    service = get_service()
    try:
        outcome = service.transform(
            transform_request.text,
            transform_request.to_settings(),
            scope=transform_request.scope,
            profile_id=transform_request.profile,
            use_cache=transform_request.use_cache,
        )
    except TextEngineError as exc:
        raise _error(exc.code, exc.message) from exc

    envelope = outcome.envelope
    _raise_for_envelope(envelope)
    result: TransformResult = envelope.result
    return TransformResponseModel(
        id=envelope.id,
        text=result.text,
        rules_applied=result.rules_applied,
        change_ratio=result.change_ratio,
        elapsed_ms=envelope.elapsed_ms,
        cached=outcome.cached,
        provenance=(
            ProvenanceModel.from_domain(outcome.provenance)
            if outcome.provenance
            else None
        ),
    )


@router.post("/v1/analyze", response_model=AnalyzeResponseModel)
async def analyze(
    analyze_request: AnalyzeRequestModel = Depends(load_analyze_request),
):
    service = get_service()
    try:
        outcome = service.analyze(
            analyze_request.text,
            max_keywords=analyze_request.max_keywords,
            summary_length=analyze_request.summary_length,
            scope=analyze_request.scope,
            profile_id=analyze_request.profile,
            use_cache=analyze_request.use_cache,
        )
    except TextEngineError as exc:
        raise _error(exc.code, exc.message) from exc

    envelope = outcome.envelope
    _raise_for_envelope(envelope)
    result: AnalysisResult = envelope.result
    return AnalyzeResponseModel(
        id=envelope.id,
        keywords=result.keywords,
        summary=result.summary,
        score=result.score,
        elapsed_ms=envelope.elapsed_ms,
        cached=outcome.cached,
    )


@router.post("/v1/messages")
async def messages(http_request: Request):
    """Raw message contract: one request envelope in, one response envelope out."""
    data = await _read_json_body(http_request, get_settings())
    if not isinstance(data, dict):
        raise _error("invalid_request", "Request message must be an object")
    envelope = get_service().dispatch(data)
    if envelope is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return JSONResponse(content=envelope.to_wire())


@router.post("/v1/messages/batch")
async def messages_batch(
    batch_request: BatchRequestModel = Depends(load_batch_request),
) -> List[Dict[str, Any]]:
    envelopes = await get_service().dispatch_batch(batch_request.messages)
    return [envelope.to_wire() for envelope in envelopes]


@router.get("/v1/history/{scope}", response_model=HistoryResponseModel)
async def history(scope: str):
    stack = get_service().history_for(scope)
    return HistoryResponseModel(
        scope=stack.scope_key,
        actions=[UndoActionModel.from_domain(action) for action in stack.actions],
    )


@router.post("/v1/history/{scope}/undo", response_model=UndoResponseModel)
async def undo(scope: str):
    service = get_service()
    action = service.undo(scope)
    return UndoResponseModel(
        scope=scope,
        action=UndoActionModel.from_domain(action) if action else None,
        remaining=len(service.history_for(scope)),
    )


@router.delete("/v1/history/{scope}", response_model=HistoryResponseModel)
async def clear_history(scope: str):
    stack = get_service().clear_history(scope)
    return HistoryResponseModel(scope=stack.scope_key, actions=[])


@router.get("/v1/profiles", response_model=List[ProfileSummary])
async def list_profiles():
    return get_profile_registry().list_profiles()
