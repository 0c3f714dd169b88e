"""Compile an ordered question list into a linear survey page graph."""

import logging
import time
import uuid
from typing import Any, Dict, Iterable, List, Union

from cobalt_hub.models.content import SurveyContent
from cobalt_hub.models.survey import (
    NumericRange,
    QuestionKind,
    SurveyChoice,
    SurveyPage,
    SurveyQuestion,
)

logger = logging.getLogger(__name__)

END_PAGE_ID = "end"
END_SURVEY_KIND = "end"
OPTIONS_SURVEY_KIND = "options"
WILDCARD = "*"

# Seconds; the connector expects both on every survey
OFFER_EXPIRATION_INTERVAL = 3600
QUESTION_EXPIRATION_INTERVAL = 3600

BOOLEAN_CHOICES = (
    ("Yes", "true"),
    ("No", "false"),
)
NPS_RANGE = (0, 10)
CES_RANGE = (1, 7)


def page_id(index: int) -> str:
    """Id of the page for the question at 0-based index."""
    return f"q-{index + 1}"


def _survey_kind(kind: QuestionKind) -> str:
    if kind in (QuestionKind.CHOICE, QuestionKind.BOOLEAN):
        return OPTIONS_SURVEY_KIND
    return kind.value


def _options(question: SurveyQuestion):
    if question.kind == QuestionKind.BOOLEAN:
        return [SurveyChoice(label=label, value=value) for label, value in BOOLEAN_CHOICES]
    if question.kind == QuestionKind.NPS:
        return NumericRange(min=NPS_RANGE[0], max=NPS_RANGE[1])
    if question.kind == QuestionKind.CES:
        return NumericRange(min=CES_RANGE[0], max=CES_RANGE[1])
    if question.choices:
        return [choice.model_copy() for choice in question.choices]
    return None


def compile_survey(
    questions: Iterable[Union[SurveyQuestion, Dict[str, Any]]],
    completion_message: str,
    completion_description: str = "",
) -> List[SurveyPage]:
    """
    Compile questions into survey pages.

    Page k (1-based) gets id ``q-k`` and routes unconditionally to ``q-(k+1)``;
    the last question routes to the terminal ``end`` page, which is always
    appended and carries the completion message and description.
    """
    parsed = [q if isinstance(q, SurveyQuestion) else SurveyQuestion.model_validate(q) for q in questions]

    pages = []
    for index, question in enumerate(parsed):
        next_id = page_id(index + 1) if index < len(parsed) - 1 else END_PAGE_ID
        pages.append(
            SurveyPage(
                id=page_id(index),
                survey_kind=_survey_kind(question.kind),
                title=question.title,
                required=question.required,
                options=_options(question),
                routing={WILDCARD: [next_id]},
            )
        )

    pages.append(
        SurveyPage(
            id=END_PAGE_ID,
            survey_kind=END_SURVEY_KIND,
            title=completion_message,
            text=completion_description,
            required=False,
            options=[],
            routing={},
        )
    )
    logger.debug("Compiled survey", extra={"questions": len(parsed), "pages": len(pages)})
    return pages


def generate_response_id(session_id: str) -> str:
    """Correlation id for the responses of one survey instance."""
    return f"resp-{session_id}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


def expiration_meta() -> Dict[str, int]:
    return {
        "offerExpirationInterval": OFFER_EXPIRATION_INTERVAL,
        "questionExpirationInterval": QUESTION_EXPIRATION_INTERVAL,
    }


def build_survey_content(session_id: str, title: str, pages: List[SurveyPage]) -> SurveyContent:
    """Wrap compiled pages in the survey rich content item."""
    return SurveyContent(
        title=title,
        pages=pages,
        meta={"surveyResponseId": generate_response_id(session_id), **expiration_meta()},
    )
