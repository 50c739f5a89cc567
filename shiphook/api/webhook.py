import json
from typing import Any, Dict

from fastapi import APIRouter, Depends, Header, Request, status
from fastapi.concurrency import run_in_threadpool

from shiphook.api.deps import get_webhook_service
from shiphook.config import Settings, get_settings
from shiphook.services import GithubWebhookService, verify_signature

router = APIRouter(prefix="/v1/hooks", tags=["Webhooks"])


@router.post("/github", status_code=status.HTTP_200_OK)
async def github_webhook(
    request: Request,
    x_hub_signature_256: str = Header(None),
    x_github_event: str = Header(None),
    settings: Settings = Depends(get_settings),
    service: GithubWebhookService = Depends(get_webhook_service),
) -> Dict[str, Any]:
    """Handle GitHub webhook events."""
    payload_bytes = await request.body()
    verify_signature(settings.GITHUB_WEBHOOK_SECRET, x_hub_signature_256, payload_bytes)
    try:
        payload = json.loads(payload_bytes or b"{}")
    except ValueError:
        return {"status": "ignored", "reason": "invalid_json"}
    if not isinstance(payload, dict):
        return {"status": "ignored", "reason": "invalid_payload"}
    # Dispatch talks to MongoDB, Redis and GitHub synchronously
    return await run_in_threadpool(
        service.handle_github_event, x_github_event, payload
    )
