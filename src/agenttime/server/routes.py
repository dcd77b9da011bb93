"""HTTP endpoints: task execution over SSE, health, and the Google connection flow."""

from typing import Any, Dict, Optional
from urllib.parse import quote, urlencode

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse, StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from agenttime.agent_core import get_logger
from agenttime.agent_core.events import encode_sse
from agenttime.agent_core.exceptions import IntegrationError
from .service import AgentService

logger = get_logger(__name__)

router = APIRouter()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # Disable proxy buffering
}


class ExecuteTaskRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    task: str
    agent_name: str = Field(alias="agentName")
    agent_role: str = Field(alias="agentRole")
    user_email: Optional[str] = Field(default=None, alias="userEmail")


class DisconnectRequest(BaseModel):
    email: Optional[str] = None


def get_service(request: Request) -> AgentService:
    return request.app.state.service


@router.post("/agent/execute")
async def execute_agent(
    payload: ExecuteTaskRequest,
    service: AgentService = Depends(get_service),
) -> StreamingResponse:
    """Run a task and stream its execution events.

    Each event is one ``data: <json>`` frame. The stream ends after the completion event;
    a client disconnect cancels the execution.
    """

    async def event_source():
        events = service.execute(payload.task, payload.agent_name, payload.agent_role, payload.user_email)
        try:
            async for event in events:
                yield encode_sse(event)
        finally:
            await events.aclose()

    return StreamingResponse(event_source(), media_type="text/event-stream", headers=SSE_HEADERS)


@router.get("/health")
async def health(service: AgentService = Depends(get_service)):
    settings = service.settings
    return {
        "status": "ok",
        "googleConfigured": settings.google_configured,
        "anthropicConfigured": bool(settings.anthropic_api_key),
        "modelProvider": settings.model_provider,
    }


@router.get("/auth/status")
async def auth_status(email: Optional[str] = None, service: AgentService = Depends(get_service)):
    return await service.tokens.status(email)


@router.post("/auth/google/disconnect")
async def disconnect(payload: DisconnectRequest, service: AgentService = Depends(get_service)):
    if payload.email and await service.tokens.invalidate(payload.email):
        return {"success": True}
    return {"success": False, "error": "Not connected"}


def frontend_redirect(service: AgentService, params: Dict[str, Any]) -> RedirectResponse:
    url = f"{service.settings.frontend_url}?{urlencode(params, quote_via=quote)}"
    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)


@router.get("/auth/google")
async def google_login(service: AgentService = Depends(get_service)) -> RedirectResponse:
    """Send the user to Google's consent page."""
    if service.oauth is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Google OAuth is not configured")
    logger.info("Redirecting to Google for consent.")
    return RedirectResponse(url=service.oauth.authorization_url(), status_code=status.HTTP_302_FOUND)


@router.get("/auth/google/callback")
async def google_callback(
    code: Optional[str] = None,
    error: Optional[str] = None,
    service: AgentService = Depends(get_service),
) -> RedirectResponse:
    """Exchange the authorization code, store the tokens and return the user to the frontend."""
    try:
        if service.oauth is None:
            raise IntegrationError("Google OAuth is not configured")
        if error:
            raise IntegrationError(error)
        if not code:
            raise IntegrationError("Missing authorization code")

        tokens = await service.oauth.exchange_code(code)
        user_info = await service.oauth.fetch_user_info(tokens["access_token"])
        email = user_info.get("email")
        if not email:
            raise IntegrationError("Google did not return an email address")
        await service.tokens.save(email, tokens, user_info)
    except IntegrationError as e:
        logger.error(f"OAuth error: {e}")
        return frontend_redirect(service, {"auth": "error", "message": str(e)})

    logger.info(f"Connected Google account '{email}'.")
    return frontend_redirect(service, {"auth": "success", "email": email, "name": user_info.get("name") or ""})
