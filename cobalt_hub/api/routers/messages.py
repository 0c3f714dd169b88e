"""Messages API router."""

from fastapi import APIRouter, Depends

from cobalt_hub.adapters.cobalt_client import CobaltClient
from cobalt_hub.api.models import (
    BatchResponse,
    EscalationRequest,
    HtmlReplyRequest,
    ReplyRequest,
    SurveyRequest,
)
from cobalt_hub.api.utils import build_context, get_cobalt_client, run_batch_request
from cobalt_hub.services.batch_processor import (
    escalation_handler,
    html_handler,
    reply_handler,
    survey_handler,
)

router = APIRouter()


@router.post("/messages/reply", tags=["Messages"], response_model=BatchResponse)
async def send_reply(request: ReplyRequest, client: CobaltClient = Depends(get_cobalt_client)):
    """
    Send a rich content reply for each input item.

    Content blocks are normalized into rich content items; unknown blocks are
    dropped unless `policy` is `strict`.

    **Example Request:**
    ```json
    {
        "items": [{"sessionId": "abc"}],
        "content": [
            {"type": "text", "message": "Hi"},
            {"type": "card", "cardTitle": "Order #42", "cardButtonText": "Track", "cardButtonAction": "track"}
        ],
        "meta": {"lockInput": true}
    }
    ```
    """
    ctx = build_context(
        request,
        client,
        params={"content": request.content, "meta": request.meta},
        policy=request.policy,
    )
    return await run_batch_request(request.items, reply_handler, ctx)


@router.post("/messages/survey", tags=["Messages"], response_model=BatchResponse)
async def send_survey(request: SurveyRequest, client: CobaltClient = Depends(get_cobalt_client)):
    """Compile the questions into survey pages and send the survey."""
    ctx = build_context(
        request,
        client,
        params={
            "title": request.title,
            "questions": request.questions,
            "completion_message": request.completion_message,
            "completion_description": request.completion_description,
        },
    )
    return await run_batch_request(request.items, survey_handler, ctx)


@router.post("/messages/html", tags=["Messages"], response_model=BatchResponse)
async def send_html(request: HtmlReplyRequest, client: CobaltClient = Depends(get_cobalt_client)):
    """Send an HTML-formatted text message with a stripped plain text fallback."""
    ctx = build_context(request, client, params={"html": request.html})
    return await run_batch_request(request.items, html_handler, ctx)


@router.post("/messages/escalate", tags=["Messages"], response_model=BatchResponse)
async def escalate(request: EscalationRequest, client: CobaltClient = Depends(get_cobalt_client)):
    """Notify the user and flag a live agent request."""
    ctx = build_context(request, client, params={"text": request.text, "reason": request.reason})
    return await run_batch_request(request.items, escalation_handler, ctx)
