"""Rich content models rendered by the Cobalt chat front-end."""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from cobalt_hub.models.survey import SurveyPage


class ContentPolicy(str, Enum):
    """How the normalizer treats malformed or unknown content."""
    LENIENT = "lenient"  # drop unknown blocks, default missing fields
    STRICT = "strict"  # raise on unknown kinds and unresolved actions


class ButtonStyle(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    DANGER = "danger"
    SPLASH = "splash"


class QuickReplyFormat(str, Enum):
    DEFAULT = "default"
    CLOUD = "cloud"


class MapMode(str, Enum):
    PLACE = "place"
    VIEW = "view"
    DIRECTIONS = "directions"
    STREETVIEW = "streetview"
    SEARCH = "search"


class WireModel(BaseModel):
    """Base for models serialized with their camelCase wire names."""
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class Button(WireModel):
    """A clickable button. `action` is already resolved."""
    text: str = ""
    action: Optional[str] = Field(None, alias="bot_action")
    link: Optional[str] = None
    icon: Optional[str] = None
    style: Optional[ButtonStyle] = Field(None, alias="type")
    splash_title: Optional[str] = Field(None, alias="title")


class ImageRef(WireModel):
    src: Optional[str] = None
    alt: Optional[str] = None
    link: Optional[str] = None


class ListEntry(WireModel):
    text: Optional[str] = None
    action: Optional[str] = Field(None, alias="bot_action")
    link: Optional[str] = None


class ListBody(WireModel):
    title: Optional[str] = None
    text: Optional[str] = None
    ordered: bool = False
    footer: Optional[str] = None
    items: List[ListEntry] = Field(default_factory=list)


class MapLink(WireModel):
    url: str
    text: Optional[str] = None


class TextContent(WireModel):
    kind: Literal["text"] = Field("text", alias="type")
    text: str = ""
    plain_text: str = Field("", alias="plainText")


class ImageContent(WireModel):
    kind: Literal["image"] = Field("image", alias="type")
    image: ImageRef


class CardContent(WireModel):
    kind: Literal["card"] = Field("card", alias="type")
    title: Optional[str] = None
    subtitle: Optional[str] = None
    text: Optional[str] = None
    image: Optional[ImageRef] = None
    button: Optional[Button] = None


class ButtonsContent(WireModel):
    kind: Literal["buttons"] = Field("buttons", alias="type")
    buttons: List[Button]

    @property
    def splash_button(self) -> Optional[Button]:
        """First button styled as splash, if any."""
        for button in self.buttons:
            if button.style == ButtonStyle.SPLASH:
                return button
        return None


class QuickReplyContent(WireModel):
    kind: Literal["quickReply"] = Field("quickReply", alias="type")
    replies: List[str]
    format: QuickReplyFormat = QuickReplyFormat.DEFAULT


class ListContent(WireModel):
    kind: Literal["list"] = Field("list", alias="type")
    body: ListBody = Field(alias="list")


class CarouselContent(WireModel):
    kind: Literal["carousel"] = Field("carousel", alias="type")
    items: List[CardContent]


class FileContent(WireModel):
    kind: Literal["file"] = Field("file", alias="type")
    name: Optional[str] = None
    size: Optional[str] = None
    url: Optional[str] = None


class MapContent(WireModel):
    kind: Literal["map"] = Field("map", alias="type")
    map_mode: Optional[MapMode] = Field(None, alias="mapMode")
    parameters: Optional[str] = None
    title: Optional[str] = None
    text: Optional[str] = None
    link: Optional[MapLink] = None


class InformationContent(WireModel):
    kind: Literal["information"] = Field("information", alias="type")
    text: str = ""


class SurveyContent(WireModel):
    kind: Literal["survey"] = Field("survey", alias="type")
    title: str = ""
    pages: List[SurveyPage]
    meta: Dict[str, Any] = Field(default_factory=dict)

    @field_serializer("pages")
    def _serialize_pages(self, pages: List[SurveyPage]) -> List[Dict[str, Any]]:
        return [page.to_wire() for page in pages]


RichContentItem = Union[
    TextContent,
    ImageContent,
    CardContent,
    ButtonsContent,
    QuickReplyContent,
    ListContent,
    CarouselContent,
    FileContent,
    MapContent,
    InformationContent,
    SurveyContent,
]
