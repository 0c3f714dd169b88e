"""Tests for content normalization."""

import pytest

from cobalt_hub.infra.error_handler import (
    InvalidButtonActionError,
    MalformedOptionalInputError,
    UnknownContentKindError,
)
from cobalt_hub.models.content import (
    ButtonsContent,
    CardContent,
    ContentPolicy,
    TextContent,
)
from cobalt_hub.models.envelope import SplashOverride
from cobalt_hub.services.content_normalizer import (
    normalize_content,
    normalize_contents,
    resolve_action,
)


def wire(record, policy=ContentPolicy.LENIENT):
    return normalize_content(record, policy).to_wire()


class TestText:
    def test_message_only(self):
        assert wire({"type": "text", "message": "Hi"}) == {
            "type": "text",
            "text": "Hi",
            "plainText": "Hi",
        }

    def test_missing_kind_defaults_to_text(self):
        assert wire({"text": "Hello"}) == {"type": "text", "text": "Hello", "plainText": "Hello"}

    def test_plain_text_derived_from_markup(self):
        result = wire({"type": "text", "text": "<b>Order</b> shipped<br/>"})
        assert result["text"] == "<b>Order</b> shipped<br/>"
        assert result["plainText"] == "Order shipped"

    def test_explicit_plain_text_kept(self):
        result = wire({"type": "text", "text": "<i>x</i>", "plainText": "custom"})
        assert result["plainText"] == "custom"

    def test_comparison_is_not_markup(self):
        result = wire({"type": "text", "text": "1 < 2 and 3 > 2"})
        assert result["plainText"] == "1 < 2 and 3 > 2"

    def test_kind_field_is_accepted(self):
        assert isinstance(normalize_content({"kind": "text", "text": "a"}), TextContent)

    def test_message_wins_over_leftover_text(self):
        result = wire({"type": "text", "message": "Hi", "text": "leftover card text"})
        assert result["text"] == "Hi"
        assert result["plainText"] == "Hi"

    def test_long_message_is_not_truncated(self):
        result = normalize_content({"type": "text", "message": "a" * 20001})
        assert result.text == "a" * 20001
        assert result.plain_text == "a" * 20001


class TestCard:
    def test_card_without_image_or_button(self):
        result = wire({"type": "card", "title": "Title", "subtitle": "Sub", "text": "Body"})
        assert result == {"type": "card", "title": "Title", "subtitle": "Sub", "text": "Body"}
        assert "image" not in result
        assert "button" not in result

    def test_workflow_field_names(self):
        result = wire({
            "type": "card",
            "cardTitle": "Order #42",
            "cardImageUrl": "https://img.test/42.png",
            "cardImageAlt": "parcel",
            "cardButtonText": "Track",
            "cardButtonAction": "track_order",
        })
        assert result["title"] == "Order #42"
        assert result["image"] == {"src": "https://img.test/42.png", "alt": "parcel"}
        assert result["button"] == {"text": "Track", "bot_action": "track_order"}

    def test_empty_strings_count_as_absent(self):
        result = wire({"type": "card", "title": "T", "imageUrl": "", "buttonText": ""})
        assert result == {"type": "card", "title": "T"}

    def test_card_button_custom_action(self):
        result = wire({
            "type": "card",
            "cardButtonText": "Go",
            "cardButtonAction": "custom",
            "customAction": "open_account",
        })
        assert result["button"]["bot_action"] == "open_account"


class TestImageFileMapInformation:
    def test_image(self):
        assert wire({"type": "image", "imageSrc": "a.png", "imageAlt": "A"}) == {
            "type": "image",
            "image": {"src": "a.png", "alt": "A"},
        }

    def test_file_numeric_size(self):
        assert wire({"type": "file", "fileName": "a.pdf", "fileSize": 1024, "fileUrl": "u"}) == {
            "type": "file",
            "name": "a.pdf",
            "size": "1024",
            "url": "u",
        }

    def test_map_link_only_with_url(self):
        without = wire({"type": "map", "mapMode": "place", "parameters": "q=Berlin", "mapLinkText": "Open"})
        assert "link" not in without
        assert without["mapMode"] == "place"

        with_link = wire({"type": "map", "mapTitle": "HQ", "mapLinkUrl": "https://maps.test", "mapLinkText": "Open"})
        assert with_link["title"] == "HQ"
        assert with_link["link"] == {"url": "https://maps.test", "text": "Open"}

    def test_map_unknown_mode_is_omitted(self):
        assert "mapMode" not in wire({"type": "map", "mapMode": "satellite"})

    def test_information_defaults_to_empty_text(self):
        assert wire({"type": "information"}) == {"type": "information", "text": ""}
        assert wire({"type": "information", "infoText": "Closed today"})["text"] == "Closed today"


class TestButtons:
    def test_flat_buttons(self):
        result = wire({
            "type": "buttons",
            "buttons": [
                {"text": "End chat", "bot_action": "__endchat__", "icon": "close", "type": "danger"},
                {"text": "Docs", "link": "https://docs.test"},
            ],
        })
        assert result["buttons"] == [
            {"text": "End chat", "bot_action": "__endchat__", "icon": "close", "type": "danger"},
            {"text": "Docs", "link": "https://docs.test"},
        ]

    def test_workflow_collection_shape(self):
        result = wire({"type": "buttons", "buttons": {"button": [{"text": "A", "bot_action": "a"}]}})
        assert result["buttons"] == [{"text": "A", "bot_action": "a"}]

    def test_custom_action_substitution(self):
        result = wire({"type": "buttons", "buttons": [{"text": "A", "bot_action": "custom", "customAction": "my_action"}]})
        assert result["buttons"][0]["bot_action"] == "my_action"

    def test_empty_custom_action_lenient_omits_action(self):
        result = wire({"type": "buttons", "buttons": [{"text": "A", "bot_action": "custom"}]})
        assert result["buttons"] == [{"text": "A"}]

    def test_empty_custom_action_strict_raises(self):
        with pytest.raises(InvalidButtonActionError):
            normalize_content(
                {"type": "buttons", "buttons": [{"text": "A", "bot_action": "custom", "customAction": ""}]},
                ContentPolicy.STRICT,
            )

    def test_malformed_buttons_are_skipped(self):
        result = wire({"type": "buttons", "buttons": ["oops", {"text": "Ok"}, 3]})
        assert result["buttons"] == [{"text": "Ok"}]

    def test_no_buttons_emits_nothing(self):
        assert normalize_content({"type": "buttons", "buttons": []}) is None
        assert normalize_content({"type": "buttons"}) is None

    def test_unknown_style_is_dropped(self):
        result = wire({"type": "buttons", "buttons": [{"text": "A", "type": "rainbow"}]})
        assert result["buttons"] == [{"text": "A"}]


class TestQuickReplyListCarousel:
    def test_quick_reply_flat(self):
        assert wire({"type": "quickReply", "replies": ["Yes", "No"]}) == {
            "type": "quickReply",
            "replies": ["Yes", "No"],
            "format": "default",
        }

    def test_quick_reply_workflow_shape(self):
        result = wire({
            "type": "quickReply",
            "quickReplyFormat": "cloud",
            "quickReplies": {"reply": [{"text": "Yes"}, {"text": ""}, {"text": "No"}]},
        })
        assert result["replies"] == ["Yes", "No"]
        assert result["format"] == "cloud"

    def test_quick_reply_empty(self):
        assert normalize_content({"type": "quickReply", "replies": []}) is None

    def test_list_defaults_ordered_false(self):
        result = wire({"type": "list", "title": "Steps", "items": [{"text": "One"}, {"text": "Two", "link": "l"}]})
        assert result == {
            "type": "list",
            "list": {
                "title": "Steps",
                "ordered": False,
                "items": [{"text": "One"}, {"text": "Two", "link": "l"}],
            },
        }

    def test_list_workflow_shape(self):
        result = wire({
            "type": "list",
            "listTitle": "Menu",
            "listOrdered": True,
            "listFooter": "fin",
            "listItems": {"item": [{"text": "Pizza", "bot_action": "custom", "customAction": "order_pizza"}]},
        })
        assert result["list"]["ordered"] is True
        assert result["list"]["footer"] == "fin"
        assert result["list"]["items"] == [{"text": "Pizza", "bot_action": "order_pizza"}]

    def test_list_string_flag(self):
        assert wire({"type": "list", "ordered": "false"})["list"]["ordered"] is False

    def test_list_item_empty_custom_action(self):
        record = {"type": "list", "items": [{"text": "Pizza", "bot_action": "custom", "customAction": ""}]}

        assert wire(record)["list"]["items"] == [{"text": "Pizza"}]
        with pytest.raises(InvalidButtonActionError):
            normalize_content(record, ContentPolicy.STRICT)

    def test_carousel(self):
        result = wire({
            "type": "carousel",
            "items": [
                {"title": "A", "imageUrl": "a.png", "buttonText": "Buy", "buttonAction": "buy_a"},
                {"title": "B"},
            ],
        })
        assert result["items"] == [
            {"type": "card", "title": "A", "image": {"src": "a.png"}, "button": {"text": "Buy", "bot_action": "buy_a"}},
            {"type": "card", "title": "B"},
        ]

    def test_carousel_card_custom_action(self):
        result = wire({
            "type": "carousel",
            "items": [{"title": "A", "buttonText": "Buy", "buttonAction": "custom", "customAction": "buy_a"}],
        })
        assert result["items"][0]["button"] == {"text": "Buy", "bot_action": "buy_a"}

    def test_carousel_card_empty_custom_action_strict(self):
        record = {"type": "carousel", "items": [{"title": "A", "buttonText": "Buy", "buttonAction": "custom"}]}

        assert wire(record)["items"][0]["button"] == {"text": "Buy"}
        with pytest.raises(InvalidButtonActionError):
            normalize_content(record, ContentPolicy.STRICT)

    def test_carousel_workflow_shape(self):
        result = normalize_content({"type": "carousel", "carouselItems": {"card": [{"title": "A"}]}})
        assert isinstance(result.items[0], CardContent)

    def test_empty_carousel_emits_nothing(self):
        assert normalize_content({"type": "carousel", "items": []}) is None


class TestUnknownAndMalformed:
    def test_unknown_kind_dropped_in_lenient_mode(self):
        assert normalize_content({"type": "hologram"}) is None

    def test_unknown_kind_raises_in_strict_mode(self):
        with pytest.raises(UnknownContentKindError):
            normalize_content({"type": "hologram"}, ContentPolicy.STRICT)

    def test_non_dict_record(self):
        assert normalize_content("text") is None
        with pytest.raises(MalformedOptionalInputError):
            normalize_content(["text"], ContentPolicy.STRICT)


class TestResolveAction:
    def test_passthrough(self):
        assert resolve_action("__endchat__", "ignored") == "__endchat__"
        assert resolve_action(None, None) is None

    def test_custom(self):
        assert resolve_action("custom", "x") == "x"
        assert resolve_action("custom", None) is None


class TestNormalizeContents:
    def test_bad_block_does_not_abort_message(self):
        bundle = normalize_contents([
            {"type": "text", "message": "Hello"},
            {"type": "unknown"},
            None,
            {"type": "card", "title": "T"},
        ])
        assert [item.kind for item in bundle.items] == ["text", "card"]
        assert bundle.plain_text == "Hello"
        assert bundle.splash is None

    def test_splash_style_promotes_message(self):
        bundle = normalize_contents([
            {"type": "text", "message": "Welcome back"},
            {"type": "buttons", "buttons": [
                {"text": "Later", "bot_action": "later"},
                {"text": "Start", "bot_action": "start", "type": "splash", "title": "Big news"},
            ]},
        ])
        assert isinstance(bundle.items[1], ButtonsContent)
        assert bundle.splash is not None
        assert bundle.splash.title == "Big news"
        assert bundle.splash.text == "Welcome back"
        assert [b.text for b in bundle.splash.buttons] == ["Later", "Start"]

    def test_explicit_splash_is_not_an_item(self):
        bundle = normalize_contents([
            {"type": "splash", "title": "Promo", "text": "50% off", "buttons": [{"text": "Shop", "bot_action": "shop"}]},
        ])
        assert bundle.items == []
        assert isinstance(bundle.splash, SplashOverride)
        assert bundle.splash.title == "Promo"

    def test_explicit_splash_wins_over_promoted(self):
        bundle = normalize_contents([
            {"type": "buttons", "buttons": [{"text": "Go", "type": "splash", "title": "From button"}]},
            {"type": "splash", "title": "Explicit", "text": "body"},
            {"type": "splash", "title": "Second"},
        ])
        assert bundle.splash.title == "Explicit"
        assert len(bundle.items) == 1
