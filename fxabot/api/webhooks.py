"""
Webhook endpoint for GitHub issue comment events.
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from starlette.requests import ClientDisconnect

from fxabot.api.dependencies import get_queue, get_settings
from fxabot.config import Settings
from fxabot.models.api_response import WebhookResponse
from fxabot.services.commands import build_job, parse_command
from fxabot.services.dispatch_queue import DispatchQueue, QueueClosedError
from fxabot.services.events import EVENT_HEADER, EventDecodeError, decode_comment_event, parse_event_kind
from fxabot.services.signature import verify_signature
from fxabot.utils.logging import get_logger, log_webhook_event

logger = get_logger(__name__)

SIGNATURE_HEADER = "X-Hub-Signature"
DELIVERY_HEADER = "X-GitHub-Delivery"


def build_router(path: str) -> APIRouter:
    """Create the router serving the webhook at `path`."""
    router = APIRouter(tags=["webhooks"])
    router.add_api_route(
        path,
        handle_github_webhook,
        methods=["POST"],
        response_model=WebhookResponse,
    )
    return router


async def handle_github_webhook(
    request: Request,
    settings: Settings = Depends(get_settings),
    queue: DispatchQueue = Depends(get_queue),
) -> WebhookResponse:
    """
    Receive a GitHub webhook and schedule the bot's reply.

    This endpoint:
    1. Rejects events other than issue_comment before reading the body
    2. Verifies the X-Hub-Signature when a webhook secret is configured
    3. Decodes the comment event and looks for a command addressed to the bot
    4. Schedules a reply job and returns 200 OK without waiting for it

    Raises:
        HTTPException: 400 for rejected requests, 500 if the job queue is closed
    """
    delivery_id = request.headers.get(DELIVERY_HEADER)

    try:
        try:
            event_kind = parse_event_kind(request.headers.get(EVENT_HEADER))
        except EventDecodeError as e:
            logger.debug(f"Rejecting webhook: {e}", extra={"delivery_id": delivery_id})
            raise HTTPException(status_code=400, detail=str(e))

        signature = request.headers.get(SIGNATURE_HEADER)

        try:
            payload = await request.body()
        except ClientDisconnect:
            logger.error("Request body error: client disconnected", extra={"delivery_id": delivery_id})
            raise HTTPException(status_code=400, detail="Incomplete request body")

        if not verify_signature(payload, settings.webhook_secret, signature):
            logger.warning("Invalid webhook signature received", extra={"delivery_id": delivery_id})
            raise HTTPException(status_code=400, detail="Invalid webhook signature")

        try:
            event = decode_comment_event(payload)
        except EventDecodeError as e:
            raise HTTPException(status_code=400, detail=str(e))

        log_webhook_event(
            logger,
            event_kind=event_kind.value,
            action=event.action.value,
            repository=event.repository.full_name,
            issue=event.issue.number,
            delivery_id=delivery_id,
        )

        command = parse_command(settings.bot_name, settings.authorized, event)
        job = build_job(command, event)
        if job is None:
            logger.debug("Ignoring comment", extra={"delivery_id": delivery_id})
            return WebhookResponse(status="ignored", message="No command for this bot")

        try:
            queue.schedule(job)
        except QueueClosedError as e:
            logger.error(f"Failed to schedule job: {e}", extra={"delivery_id": delivery_id})
            raise HTTPException(status_code=500, detail="Unable to schedule job")

        return WebhookResponse(
            status="accepted",
            message=f"{command.value} job {job.job_id} scheduled",
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error handling webhook: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error processing webhook")
