from fastapi import APIRouter, Body, Depends, Request
import logging
from fastapi.responses import JSONResponse
from typing import Any, Dict

from chatproxy.core.errors import AuthFormatError
from chatproxy.core.ratelimit import brute_force_guard, enforce_chat_rate_limit, get_client_ip
from chatproxy.core.security import validate_api_key, validate_chat_request
from chatproxy.services.chat_service import ChatService, chat_service

router = APIRouter()
logger = logging.getLogger(__name__)


def get_chat_service() -> ChatService:
    return chat_service


@router.post("/chat/message", dependencies=[Depends(enforce_chat_rate_limit)])
async def send_message(
    http_request: Request,
    payload: Any = Body(...),
    service: ChatService = Depends(get_chat_service),
) -> Dict[str, Any]:
    """Validate, sanitize and forward one conversation to the selected provider."""
    ip = get_client_ip(http_request)
    request = validate_chat_request(payload)
    if not validate_api_key(request.config.apiKey):
        raise AuthFormatError()

    logger.info(
        "/chat/message provider=%s model=%s messages=%d",
        request.config.provider,
        request.config.modelId,
        len(request.messages),
    )
    response = await service.send_message(request)

    if response.error:
        if response.upstream_status in (401, 403):
            attempts = brute_force_guard.record_failed_attempt(ip)
            logger.warning("Provider rejected credentials from %s (%d failed attempts)", ip, attempts)
        return JSONResponse(status_code=400, content={"error": response.error})

    brute_force_guard.clear_failed_attempts(ip)
    return response.to_body()
