"""Validation of raw form input into a ``GenerationRequest``."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Type

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .config import WorkflowConfig
from .contracts import Audience, GenerationRequest, Length, Tone
from .errors import FieldError, InvalidRequestError

logger = logging.getLogger(__name__)

TOGGLE_FIELDS = ("seo_focus", "include_images", "social_media", "analytics_enabled")

# Accepted spellings per field; the first entry is the canonical name.
FIELD_KEYS: Dict[str, tuple] = {
    "topic": ("topic",),
    "audience": ("audience",),
    "tone": ("tone",),
    "length": ("length",),
    "seo_focus": ("seo_focus", "seoFocus"),
    "include_images": ("include_images", "includeImages"),
    "social_media": ("social_media", "socialMedia"),
    "analytics_enabled": ("analytics_enabled", "analyticsEnabled", "analytics"),
}

_bool_adapter = TypeAdapter(bool)


class GenerationRequestBuilder:
    """Build validated requests from loosely typed input.

    Missing enum values fall back to ``audience=general`` and to the tone and
    length defaults of the supplied ``WorkflowConfig``. Missing toggles are
    ``True``. Every problem found is reported together in one
    ``InvalidRequestError``.
    """

    def __init__(self, defaults: Optional[WorkflowConfig] = None) -> None:
        self.defaults = defaults or WorkflowConfig()

    def defaults_form(self) -> Dict[str, Any]:
        """Values used to pre-populate a new request form."""
        return {
            "topic": "",
            "audience": Audience.GENERAL.value,
            "tone": self.defaults.default_tone.value,
            "length": self.defaults.default_length.value,
            **{name: True for name in TOGGLE_FIELDS},
        }

    def build(self, raw: Mapping[str, Any]) -> GenerationRequest:
        values = self._collect(raw)
        errors: List[FieldError] = []
        cleaned: Dict[str, Any] = {}

        topic = values.get("topic")
        if not isinstance(topic, str) or not topic.strip():
            errors.append(FieldError(field="topic", reason="topic must not be empty"))
        else:
            cleaned["topic"] = topic.strip()

        fallbacks = {
            "audience": Audience.GENERAL,
            "tone": self.defaults.default_tone,
            "length": self.defaults.default_length,
        }
        enums: Dict[str, Type[Enum]] = {
            "audience": Audience,
            "tone": Tone,
            "length": Length,
        }
        for name, enum_cls in enums.items():
            value = values.get(name)
            if value is None or value == "":
                cleaned[name] = fallbacks[name]
                continue
            member = _parse_enum(enum_cls, value)
            if member is None:
                allowed = ", ".join(m.value for m in enum_cls)
                errors.append(
                    FieldError(field=name, reason=f"must be one of: {allowed}")
                )
            else:
                cleaned[name] = member

        for name in TOGGLE_FIELDS:
            if name not in values or values[name] is None:
                cleaned[name] = True
                continue
            try:
                cleaned[name] = _bool_adapter.validate_python(values[name])
            except PydanticValidationError:
                errors.append(FieldError(field=name, reason="must be a boolean"))

        if errors:
            raise InvalidRequestError(errors)
        return GenerationRequest(**cleaned)

    def _collect(self, raw: Mapping[str, Any]) -> Dict[str, Any]:
        known = {key: name for name, keys in FIELD_KEYS.items() for key in keys}
        values: Dict[str, Any] = {}
        for key, value in raw.items():
            name = known.get(key)
            if name is None:
                logger.debug(f"Ignoring unknown request field {key!r}")
                continue
            values.setdefault(name, value)
        return values


def _parse_enum(enum_cls: Type[Enum], value: Any) -> Optional[Enum]:
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        return None
    try:
        return enum_cls(value.strip().lower())
    except ValueError:
        return None
