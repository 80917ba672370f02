import json
import logging
from enum import Enum
from typing import Any
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from disclosure_panel.parsing.json_normalizer import normalize

logger = logging.getLogger(__name__)

REASONING = "reasoning"
CODE_INTERPRETER = "code_interpreter"
TOOL_CALLS = "tool_calls"


class DoneState(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


class AttributeSet(BaseModel):
    """Caller-supplied descriptor of what a disclosure panel shows.

    Values usually arrive as strings scraped from markup, so ``arguments``,
    ``result`` and ``files`` may be JSON-encoded (sometimes more than once)
    and ``done`` is a tri-state encoded as presence plus the string ``"true"``.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    kind: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("kind", "type")
    )
    done: Optional[str] = None
    duration: Optional[float] = None
    name: Optional[str] = None
    id: Optional[str] = None
    arguments: Optional[str] = None
    result: Optional[str] = None
    files: Optional[str] = None

    @field_validator(
        "kind", "done", "name", "id", "arguments", "result", "files", mode="before"
    )
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, bool):
            return "true" if value else "false"
        return json.dumps(value)

    @field_validator("duration", mode="before")
    @classmethod
    def _coerce_duration(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            logger.debug("Ignoring non-numeric duration %r", value)
            return None

    @property
    def done_state(self) -> DoneState:
        if self.done is None:
            return DoneState.NOT_STARTED
        if self.done == "true":
            return DoneState.COMPLETE
        return DoneState.IN_PROGRESS

    @property
    def is_complete(self) -> bool:
        return self.done_state is DoneState.COMPLETE

    def decoded_files(self) -> list[str]:
        """Return the attachment references encoded in ``files``.

        Objects carrying a ``url`` key contribute that URL; any other
        non-string entry becomes an empty reference so indices stay aligned
        with the original list.
        """
        if not self.files:
            return []
        decoded = normalize(self.files)
        if not isinstance(decoded, list):
            return []
        refs = []
        for item in decoded:
            if isinstance(item, str):
                refs.append(item)
            elif isinstance(item, dict) and isinstance(item.get("url"), str):
                refs.append(item["url"])
            else:
                refs.append("")
        return refs


def as_attribute_set(attributes) -> AttributeSet:
    if attributes is None:
        return AttributeSet()
    if isinstance(attributes, AttributeSet):
        return attributes
    return AttributeSet.model_validate(attributes)
