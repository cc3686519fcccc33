"""
API keys router — thin HTTP binding over KeyLifecycleService.

  POST   /api/keys             create, returns the full key (201)
  GET    /api/keys             list, masked
  GET    /api/keys/{id}        reveal, full key
  PUT    /api/keys/{id}        update name/limit, masked
  DELETE /api/keys/{id}        revoke (204)
  GET    /api/keys/{id}/quota  usage vs. monthly limit

Errors are raised by the service and mapped to JSON by the exception
handlers registered in keyforge.main.
"""

from fastapi import APIRouter, Response, status

from keyforge.keys.dependencies import KeyService
from keyforge.schemas.api_key import (
    ApiKeyCreate,
    ApiKeyUpdate,
    ApiKeyView,
    ErrorOut,
    QuotaStatusOut,
)

router = APIRouter(tags=["API Keys"])

_NOT_FOUND = {status.HTTP_404_NOT_FOUND: {"model": ErrorOut}}
_INVALID = {status.HTTP_400_BAD_REQUEST: {"model": ErrorOut}}


@router.post(
    "/keys",
    response_model=ApiKeyView,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses=_INVALID,
    summary="Create an API key",
    description=(
        "Generates a new secret and returns it in full. "
        "This is the only response that carries the secret without "
        "an explicit reveal."
    ),
)
async def create_key(payload: ApiKeyCreate, service: KeyService) -> ApiKeyView:
    return await service.create_key(payload.name, payload.limit)


@router.get(
    "/keys",
    response_model=list[ApiKeyView],
    response_model_exclude_none=True,
    summary="List API keys (masked)",
)
async def list_keys(service: KeyService) -> list[ApiKeyView]:
    return await service.list_keys()


@router.get(
    "/keys/{key_id}",
    response_model=ApiKeyView,
    response_model_exclude_none=True,
    responses=_NOT_FOUND,
    summary="Reveal one API key",
)
async def reveal_key(key_id: str, service: KeyService) -> ApiKeyView:
    return await service.reveal_key(key_id)


@router.put(
    "/keys/{key_id}",
    response_model=ApiKeyView,
    response_model_exclude_none=True,
    responses={**_INVALID, **_NOT_FOUND},
    summary="Update an API key's name and limit",
    description="Omitting limit clears it. The response is always masked.",
)
async def update_key(
    key_id: str,
    payload: ApiKeyUpdate,
    service: KeyService,
) -> ApiKeyView:
    return await service.update_key(key_id, payload.name, payload.limit)


@router.delete(
    "/keys/{key_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=_NOT_FOUND,
    summary="Delete an API key",
)
async def delete_key(key_id: str, service: KeyService) -> Response:
    await service.delete_key(key_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/keys/{key_id}/quota",
    response_model=QuotaStatusOut,
    responses=_NOT_FOUND,
    summary="Usage against the monthly limit",
    description="Read-only. Limits are recorded here but enforced elsewhere.",
)
async def get_quota(key_id: str, service: KeyService) -> QuotaStatusOut:
    quota = await service.quota_status(key_id)
    return QuotaStatusOut.model_validate(quota)
