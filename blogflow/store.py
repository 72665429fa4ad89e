"""In-process holder for the user-adjustable workflow configuration."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from .config import WorkflowConfig
from .errors import FieldError, ValidationError

logger = logging.getLogger(__name__)


def _field_names() -> Dict[str, str]:
    """Map every accepted key (field name and alias) to its field name."""
    names: Dict[str, str] = {}
    for name, info in WorkflowConfig.model_fields.items():
        names[name] = name
        if info.alias:
            names[info.alias] = name
    return names


class ConfigurationStore:
    """Holds the current ``WorkflowConfig``.

    Updates are all-or-nothing: if any supplied field is unknown or out of
    range, the held value is left untouched and ``ValidationError`` is raised.
    """

    def __init__(self, initial: Optional[WorkflowConfig] = None) -> None:
        self._config = (initial or WorkflowConfig()).model_copy()

    def get(self) -> WorkflowConfig:
        return self._config.model_copy()

    def set(
        self, partial: Optional[Mapping[str, Any]] = None, **changes: Any
    ) -> WorkflowConfig:
        """Apply ``partial`` (and keyword ``changes``) and return the new config.

        Keys may use either snake_case field names or their camelCase aliases.
        """
        updates = {**(partial or {}), **changes}
        accepted = _field_names()

        errors: List[FieldError] = []
        # field name -> key as the caller spelled it
        spelled: Dict[str, str] = {}
        for key in updates:
            if key not in accepted:
                errors.append(FieldError(field=key, reason="unknown setting"))
                continue
            spelled[accepted[key]] = key

        merged = self._config.model_dump()
        merged.update({accepted[k]: v for k, v in updates.items() if k in accepted})
        try:
            candidate = WorkflowConfig.model_validate(merged)
        except PydanticValidationError as exc:
            for err in exc.errors():
                key = str(err["loc"][0]) if err["loc"] else "config"
                name = accepted.get(key, key)
                errors.append(
                    FieldError(field=spelled.get(name, name), reason=err["msg"])
                )
            candidate = None

        if errors:
            logger.info(
                f"Rejected configuration update: {', '.join(str(e) for e in errors)}"
            )
            raise ValidationError(errors[0].field, errors[0].reason, errors)

        self._config = candidate
        logger.debug(f"Configuration updated: {sorted(spelled)}")
        return self.get()
