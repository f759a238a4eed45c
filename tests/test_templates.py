"""Template selection, language parsing and placeholder substitution."""

import pytest

from agrinotify.templates.catalog import (
    PUSH_BODIES,
    PUSH_TITLES,
    SMS_TEMPLATES,
    OrderStatus,
    TemplateType,
    default_deeplink,
    order_status_key,
    render_push,
    render_sms,
)
from agrinotify.templates.renderer import (
    Language,
    TemplateCatalog,
    UnknownTemplateError,
    parse_language,
    substitute,
    supported_languages,
    template_variables,
)


@pytest.mark.parametrize(
    "code, expected",
    [
        ("kn", Language.KANNADA),
        ("kn-IN", Language.KANNADA),
        ("ka", Language.KANNADA),
        ("HI", Language.HINDI),
        ("ta_IN", Language.TAMIL),
        ("te", Language.TELUGU),
        ("en-GB", Language.ENGLISH),
        ("fr", Language.ENGLISH),
        ("", Language.ENGLISH),
        (None, Language.ENGLISH),
    ],
)
def test_parse_language(code, expected):
    assert parse_language(code) == expected


def test_every_sms_template_renders_without_leftover_placeholders():
    """Each (type, language) variant is fully substituted given its own variables."""

    for key in SMS_TEMPLATES.keys():
        for language in SMS_TEMPLATES.languages(key):
            template = SMS_TEMPLATES.template(key, language)
            variables = {name: "x" for name in template_variables(template)}
            assert "{{" not in SMS_TEMPLATES.render(key, language, variables), (key, language)


def test_multilingual_families_cover_all_languages():
    for key in (
        TemplateType.ORDER_MATCHED,
        TemplateType.PAYMENT_RECEIVED,
        TemplateType.MATCH_EXPIRING,
        TemplateType.ORDER_CANCELLED,
        TemplateType.QUALITY_DISPUTE,
        TemplateType.DROP_POINT_ASSIGNMENT,
        TemplateType.DROP_POINT_CHANGE,
        TemplateType.ORDER_CONFIRMATION,
    ):
        assert set(SMS_TEMPLATES.languages(key)) == set(Language), key


def test_english_only_types_fall_back_to_english():
    variables = {"hauler_name": "Ravi", "order_id": "o-1", "eta_minutes": 15}
    for language in ("fr", "kn", "hi"):
        assert render_sms(TemplateType.HAULER_EN_ROUTE, language, variables) == render_sms(
            TemplateType.HAULER_EN_ROUTE, "en", variables
        )


def test_missing_and_none_variables_become_empty():
    assert substitute("Hi {{name}}, {{ crop }}!", {"name": None}) == "Hi , !"


def test_unknown_key_uses_catalog_fallback():
    assert render_sms("NOT_A_TYPE", "kn") == "CropFresh: Notification for NOT_A_TYPE"
    assert PUSH_TITLES.render("NOT_A_TYPE", "en") == "CropFresh Notification"
    assert PUSH_BODIES.render(TemplateType.OTP, "en") == "You have a new notification"


def test_unknown_key_without_fallback_raises():
    catalog = TemplateCatalog("strict", {"A": {Language.ENGLISH: "a"}})
    with pytest.raises(UnknownTemplateError):
        catalog.render("B", "en")


def test_kannada_order_matched():
    variables = {"quantity_kg": "50", "crop_name": "Tomato", "price_per_kg": "35", "total_amount": "1750"}
    text = render_sms(TemplateType.ORDER_MATCHED, "kn", variables)
    assert "ಹೊಸ ಖರೀದಿದಾರ" in text
    assert "50kg Tomato" in text
    title, body = render_push(TemplateType.ORDER_MATCHED, "kn", variables)
    assert title == "🎉 ಖರೀದಿದಾರ ಸಿಕ್ಕಿದ್ದಾರೆ!"
    assert body == "Accept match for 50kg Tomato at ₹1750"


def test_default_deeplink():
    assert default_deeplink("PAYMENT_RECEIVED") == "/earnings"
    assert default_deeplink("SOMETHING_ELSE") == "/notifications"


def test_supported_languages():
    assert [language.value for language in supported_languages()] == ["en", "kn", "hi", "ta", "te"]


def test_every_tracking_status_is_localized():
    for status in OrderStatus:
        key = order_status_key(status)
        assert set(SMS_TEMPLATES.languages(key)) == set(Language), key
        assert set(PUSH_TITLES.languages(key)) == set(Language), key


def test_order_status_sms():
    variables = {"total_amount": "1750", "upi_transaction_id": "UPI9"}
    assert order_status_key("PAID") == "ORDER_STATUS_PAID"
    assert render_sms(order_status_key(OrderStatus.PAID), "hi", variables) == "CropFresh: ₹1750 आपके खाते में! UPI Ref: UPI9"
    with pytest.raises(ValueError):
        order_status_key("LOST")
