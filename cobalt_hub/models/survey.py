"""Survey question and compiled page models."""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class QuestionKind(str, Enum):
    TEXT = "text"
    RATING = "rating"
    CHOICE = "choice"
    BOOLEAN = "boolean"
    NPS = "nps"
    CES = "ces"


class SurveyChoice(BaseModel):
    """One selectable answer."""
    label: str = ""
    value: str = ""

    @field_validator("label", "value", mode="before")
    @classmethod
    def _coerce_str(cls, v: Any) -> str:
        if v is None:
            return ""
        if isinstance(v, bool):
            return "true" if v else "false"
        return str(v)


class SurveyQuestion(BaseModel):
    """A question as authored, before compilation."""
    model_config = ConfigDict(populate_by_name=True)

    kind: QuestionKind = Field(..., alias="type")
    title: str = ""
    required: bool = False
    choices: List[SurveyChoice] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _unwrap_options(cls, data: Any) -> Any:
        # Workflow UI shape: {"options": {"option": [{label, value}, ...]}}
        if isinstance(data, dict) and "choices" not in data and "options" in data:
            data = dict(data)
            options = data.pop("options")
            if isinstance(options, dict):
                options = options.get("option")
            data["choices"] = [o for o in options or [] if isinstance(o, dict)]
        return data


class NumericRange(BaseModel):
    min: int
    max: int


class SurveyPage(BaseModel):
    """A compiled, routable survey page."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    survey_kind: str = Field(..., alias="surveyType")
    title: str = ""
    text: Optional[str] = None
    required: bool = False
    options: Union[List[SurveyChoice], NumericRange, None] = None
    routing: Dict[str, List[str]] = Field(default_factory=dict)

    def to_wire(self) -> Dict[str, Any]:
        """
        Serialize for the connector.

        The routing table is written under meta.answers with each target
        wrapped as {"id": ...}; a page without routing writes an empty
        wildcard list.
        """
        page = self.model_dump(by_alias=True, exclude_none=True, exclude={"routing"}, mode="json")
        if self.routing:
            answers = {
                match: [{"id": target} for target in targets]
                for match, targets in self.routing.items()
            }
        else:
            answers = {"*": []}
        page["meta"] = {"answers": answers}
        return page
