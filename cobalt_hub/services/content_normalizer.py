"""Normalization of loosely typed content records into rich content items.

Records come from two producers: content blocks authored in a workflow step
(nested collections such as ``buttons.button[]`` and prefixed field names such
as ``cardTitle``) and flat LLM tool calls (``buttons[]``, ``title``). Every
field is looked up through an ordered alias list so both shapes map onto the
same item.

In lenient mode a malformed block degrades (fields omitted, strings
defaulted) and an unknown block is dropped, so one bad block never aborts the
message. Strict mode raises instead.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from cobalt_hub.infra.error_handler import (
    InvalidButtonActionError,
    MalformedOptionalInputError,
    UnknownContentKindError,
)
from cobalt_hub.infra.metrics import content_items_dropped_total
from cobalt_hub.infra.validation import contains_markup, sanitize_text, strip_html
from cobalt_hub.models.content import (
    Button,
    ButtonsContent,
    ButtonStyle,
    CardContent,
    CarouselContent,
    ContentPolicy,
    FileContent,
    ImageContent,
    ImageRef,
    InformationContent,
    ListBody,
    ListContent,
    ListEntry,
    MapContent,
    MapLink,
    MapMode,
    QuickReplyContent,
    QuickReplyFormat,
    RichContentItem,
    TextContent,
)
from cobalt_hub.models.envelope import SplashOverride

logger = logging.getLogger(__name__)

CUSTOM_ACTION = "custom"

Record = Dict[str, Any]
Normalized = Union[RichContentItem, SplashOverride]


# ---------------------------------------------------------------------------
# Field access
# ---------------------------------------------------------------------------

def _pick(record: Record, *names: str) -> Any:
    """First value present under any of the names; empty strings count as absent."""
    for name in names:
        value = record.get(name)
        if value is not None and value != "":
            return value
    return None


def _text(record: Record, *names: str) -> Optional[str]:
    value = _pick(record, *names)
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _flag(record: Record, *names: str) -> bool:
    value = _pick(record, *names)
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _entries(record: Record, name: str, wrapped: Optional[str] = None, wrapper_key: Optional[str] = None) -> List[Any]:
    """
    Collect a repeated sub-record.

    Accepts a plain list under ``name`` or the workflow collection shape
    ``{wrapped: {wrapper_key: [...]}}``.
    """
    value = record.get(name)
    if isinstance(value, dict) and wrapper_key:
        value = value.get(wrapper_key)
    if not isinstance(value, list) and wrapped:
        value = record.get(wrapped)
        if isinstance(value, dict):
            value = value.get(wrapper_key)
    if not isinstance(value, list):
        return []
    return value


def _enum(enum_cls, value: Optional[str]):
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        logger.debug("Ignoring unsupported value", extra={"enum": enum_cls.__name__, "value": value})
        return None


def _dicts(entries: Iterable[Any], what: str) -> List[Record]:
    result = []
    for entry in entries:
        if isinstance(entry, dict):
            result.append(entry)
        else:
            content_items_dropped_total.labels(reason="malformed").inc()
            logger.debug(f"Skipping malformed {what}", extra={"entry_type": type(entry).__name__})
    return result


# ---------------------------------------------------------------------------
# Actions and buttons
# ---------------------------------------------------------------------------

def resolve_action(
    selector: Optional[str],
    custom: Optional[str],
    policy: ContentPolicy = ContentPolicy.LENIENT,
) -> Optional[str]:
    """
    Resolve a button action.

    Built-in tokens (e.g. ``__endchat__``) and free-form actions pass through.
    The ``custom`` selector takes its value from the companion custom field.

    Raises:
        InvalidButtonActionError: custom selected without a value, strict mode only
    """
    if selector != CUSTOM_ACTION:
        return selector
    if custom:
        return custom
    if policy == ContentPolicy.STRICT:
        raise InvalidButtonActionError("Custom action selected but no custom action was provided")
    logger.warning("Custom action selected but no custom action was provided; omitting action")
    return None


def _button(record: Record, policy: ContentPolicy) -> Button:
    return Button(
        text=_text(record, "text") or "",
        action=resolve_action(
            _text(record, "bot_action", "action"),
            _text(record, "customAction", "custom_action", "customBotAction"),
            policy,
        ),
        link=_text(record, "link"),
        icon=_text(record, "icon"),
        style=_enum(ButtonStyle, _text(record, "type", "style")),
        splash_title=_text(record, "title", "splashTitle"),
    )


def _buttons(entries: Iterable[Any], policy: ContentPolicy) -> List[Button]:
    return [_button(entry, policy) for entry in _dicts(entries, "button")]


def _card(record: Record, policy: ContentPolicy) -> CardContent:
    card = CardContent(
        title=_text(record, "title", "cardTitle"),
        subtitle=_text(record, "subtitle", "cardSubtitle"),
        text=_text(record, "text", "cardText"),
    )
    image_url = _text(record, "imageUrl", "cardImageUrl", "imageSrc")
    if image_url:
        card.image = ImageRef(src=image_url, alt=_text(record, "imageAlt", "cardImageAlt"))
    button_text = _text(record, "buttonText", "cardButtonText")
    if button_text:
        card.button = Button(
            text=button_text,
            action=resolve_action(
                _text(record, "buttonAction", "cardButtonAction"),
                _text(record, "customAction", "cardCustomAction", "buttonCustomAction"),
                policy,
            ),
        )
    return card


# ---------------------------------------------------------------------------
# Per-kind normalizers
# ---------------------------------------------------------------------------

def _normalize_text(record: Record, policy: ContentPolicy) -> TextContent:
    text = sanitize_text(_text(record, "message", "text") or "")
    plain_text = _text(record, "plainText")
    if plain_text is None:
        plain_text = strip_html(text) if contains_markup(text) else text
    return TextContent(text=text, plain_text=sanitize_text(plain_text))


def _normalize_image(record: Record, policy: ContentPolicy) -> ImageContent:
    return ImageContent(
        image=ImageRef(
            src=_text(record, "imageSrc", "src", "imageUrl"),
            alt=_text(record, "imageAlt", "alt"),
            link=_text(record, "imageLink", "link"),
        )
    )


def _normalize_card(record: Record, policy: ContentPolicy) -> CardContent:
    return _card(record, policy)


def _normalize_buttons(record: Record, policy: ContentPolicy) -> Optional[ButtonsContent]:
    buttons = _buttons(_entries(record, "buttons", wrapper_key="button"), policy)
    if not buttons:
        return None
    return ButtonsContent(buttons=buttons)


def _normalize_quick_reply(record: Record, policy: ContentPolicy) -> Optional[QuickReplyContent]:
    replies = []
    for reply in _entries(record, "replies", wrapped="quickReplies", wrapper_key="reply"):
        if isinstance(reply, dict):
            reply = _text(reply, "text")
        if isinstance(reply, str) and reply:
            replies.append(reply)
    if not replies:
        return None
    reply_format = _enum(QuickReplyFormat, _text(record, "format", "quickReplyFormat"))
    return QuickReplyContent(replies=replies, format=reply_format or QuickReplyFormat.DEFAULT)


def _normalize_list(record: Record, policy: ContentPolicy) -> ListContent:
    entries = _dicts(_entries(record, "items", wrapped="listItems", wrapper_key="item"), "list item")
    return ListContent(
        body=ListBody(
            title=_text(record, "title", "listTitle"),
            text=_text(record, "text", "listText"),
            ordered=_flag(record, "ordered", "listOrdered"),
            footer=_text(record, "footer", "listFooter"),
            items=[
                ListEntry(
                    text=_text(entry, "text"),
                    action=resolve_action(
                        _text(entry, "bot_action", "action"),
                        _text(entry, "customAction", "custom_action"),
                        policy,
                    ),
                    link=_text(entry, "link"),
                )
                for entry in entries
            ],
        )
    )


def _normalize_carousel(record: Record, policy: ContentPolicy) -> Optional[CarouselContent]:
    entries = _dicts(_entries(record, "items", wrapped="carouselItems", wrapper_key="card"), "carousel card")
    if not entries:
        return None
    return CarouselContent(items=[_card(entry, policy) for entry in entries])


def _normalize_file(record: Record, policy: ContentPolicy) -> FileContent:
    return FileContent(
        name=_text(record, "fileName", "name"),
        size=_text(record, "fileSize", "size"),
        url=_text(record, "fileUrl", "url"),
    )


def _normalize_map(record: Record, policy: ContentPolicy) -> MapContent:
    content = MapContent(
        map_mode=_enum(MapMode, _text(record, "mapMode")),
        parameters=_text(record, "parameters", "mapParameters"),
        title=_text(record, "title", "mapTitle"),
        text=_text(record, "text", "mapText"),
    )
    link_url = _text(record, "mapLinkUrl")
    if link_url:
        content.link = MapLink(url=link_url, text=_text(record, "mapLinkText"))
    return content


def _normalize_information(record: Record, policy: ContentPolicy) -> InformationContent:
    return InformationContent(text=_text(record, "text", "infoText") or "")


def _normalize_splash(record: Record, policy: ContentPolicy) -> SplashOverride:
    return SplashOverride(
        title=_text(record, "title") or "",
        text=sanitize_text(_text(record, "message", "text") or ""),
        buttons=_buttons(_entries(record, "buttons", wrapper_key="button"), policy),
    )


_NORMALIZERS: Dict[str, Callable[[Record, ContentPolicy], Optional[Normalized]]] = {
    "text": _normalize_text,
    "image": _normalize_image,
    "card": _normalize_card,
    "buttons": _normalize_buttons,
    "quickReply": _normalize_quick_reply,
    "list": _normalize_list,
    "carousel": _normalize_carousel,
    "file": _normalize_file,
    "map": _normalize_map,
    "information": _normalize_information,
    "splash": _normalize_splash,
}

CONTENT_KINDS = tuple(_NORMALIZERS)


def normalize_content(record: Any, policy: ContentPolicy = ContentPolicy.LENIENT) -> Optional[Normalized]:
    """
    Normalize one content record.

    Args:
        record: Raw content record with a ``type`` (or ``kind``) discriminant
        policy: Lenient drops what it cannot map; strict raises

    Returns:
        A rich content item, a SplashOverride for the ``splash`` kind, or
        None when the block was dropped

    Raises:
        UnknownContentKindError: unknown discriminant, strict mode only
        MalformedOptionalInputError: record is not an object, strict mode only
        InvalidButtonActionError: unresolved custom action, strict mode only
    """
    if not isinstance(record, dict):
        if policy == ContentPolicy.STRICT:
            raise MalformedOptionalInputError("Content record must be an object", field="content")
        content_items_dropped_total.labels(reason="malformed").inc()
        logger.warning("Dropping malformed content record", extra={"record_type": type(record).__name__})
        return None

    kind = _text(record, "type", "kind") or "text"
    normalizer = _NORMALIZERS.get(kind)
    if normalizer is None:
        if policy == ContentPolicy.STRICT:
            raise UnknownContentKindError(kind)
        content_items_dropped_total.labels(reason="unknown_kind").inc()
        logger.debug("Dropping content block with unknown kind", extra={"kind": kind})
        return None

    result = normalizer(record, policy)
    if result is None:
        content_items_dropped_total.labels(reason="empty").inc()
        logger.debug("Dropping empty content block", extra={"kind": kind})
    return result


@dataclass
class ContentBundle:
    """Normalized content for one message."""
    items: List[RichContentItem] = field(default_factory=list)
    splash: Optional[SplashOverride] = None

    @property
    def plain_text(self) -> Optional[str]:
        """Plain text of the first text item, if any."""
        for item in self.items:
            if isinstance(item, TextContent) and item.plain_text:
                return item.plain_text
        return None


def normalize_contents(records: Iterable[Any], policy: ContentPolicy = ContentPolicy.LENIENT) -> ContentBundle:
    """
    Normalize all content records of one message.

    An explicit ``splash`` record makes the message a splash (first one wins).
    Otherwise a buttons block containing a splash-styled button promotes the
    message to splash, titled with that button's title.
    """
    bundle = ContentBundle()
    promoted: Optional[SplashOverride] = None

    for record in records or []:
        result = normalize_content(record, policy)
        if result is None:
            continue
        if isinstance(result, SplashOverride):
            if bundle.splash is None:
                bundle.splash = result
            else:
                logger.debug("Ignoring additional splash record")
            continue
        bundle.items.append(result)
        if promoted is None and isinstance(result, ButtonsContent):
            splash_button = result.splash_button
            if splash_button is not None:
                promoted = SplashOverride(
                    title=splash_button.splash_title or "",
                    buttons=result.buttons,
                )

    if bundle.splash is None and promoted is not None:
        promoted.text = bundle.plain_text or ""
        bundle.splash = promoted

    return bundle
