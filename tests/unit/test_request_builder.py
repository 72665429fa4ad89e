"""Generation request builder tests."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from blogflow import GenerationRequestBuilder, InvalidRequestError, WorkflowConfig
from blogflow.contracts import Audience, Length, Tone


def test_missing_fields_fall_back_to_defaults():
    request = GenerationRequestBuilder().build({"topic": "  Remote Work  "})

    assert request.topic == "Remote Work"
    assert request.audience is Audience.GENERAL
    assert request.tone is Tone.PROFESSIONAL
    assert request.length is Length.MEDIUM
    assert request.seo_focus
    assert request.include_images
    assert request.social_media
    assert request.analytics_enabled


def test_configured_defaults_prepopulate_tone_and_length():
    defaults = WorkflowConfig(default_tone="casual", default_length="short")
    builder = GenerationRequestBuilder(defaults)

    request = builder.build({"topic": "Hiking", "tone": None, "length": ""})
    assert request.tone is Tone.CASUAL
    assert request.length is Length.SHORT

    form = builder.defaults_form()
    assert form["tone"] == "casual"
    assert form["length"] == "short"
    assert form["audience"] == "general"
    assert form["seo_focus"] is True


def test_form_spellings_are_accepted():
    request = GenerationRequestBuilder().build(
        {
            "topic": "Cloud Costs",
            "audience": "Business",
            "tone": "persuasive",
            "length": "long",
            "seoFocus": False,
            "includeImages": "off",
            "socialMedia": "true",
            "analytics": 0,
            "unexpected": "ignored",
        }
    )

    assert request.audience is Audience.BUSINESS
    assert request.tone is Tone.PERSUASIVE
    assert request.length is Length.LONG
    assert request.seo_focus is False
    assert request.include_images is False
    assert request.social_media is True
    assert request.analytics_enabled is False


def test_all_field_errors_are_reported_together():
    with pytest.raises(InvalidRequestError) as exc_info:
        GenerationRequestBuilder().build(
            {
                "topic": "   ",
                "audience": "children",
                "tone": "sarcastic",
                "length": "epic",
                "includeImages": "maybe",
            }
        )

    assert exc_info.value.fields == [
        "topic",
        "audience",
        "tone",
        "length",
        "include_images",
    ]


def test_missing_topic_is_an_error():
    with pytest.raises(InvalidRequestError) as exc_info:
        GenerationRequestBuilder().build({})
    assert exc_info.value.fields == ["topic"]


def test_built_request_is_immutable():
    request = GenerationRequestBuilder().build({"topic": "Frozen"})
    with pytest.raises(PydanticValidationError):
        request.topic = "Changed"


def test_length_word_ranges():
    assert Length.SHORT.word_range == (500, 800)
    assert Length.MEDIUM.word_range == (800, 1500)
    assert Length.LONG.word_range == (1500, None)
