"""Collapsed-state summary labels for disclosure panels."""

from datetime import datetime
from datetime import timedelta

from dateutil.relativedelta import relativedelta

from disclosure_panel.disclosure.attributes import CODE_INTERPRETER
from disclosure_panel.disclosure.attributes import REASONING
from disclosure_panel.disclosure.attributes import TOOL_CALLS
from disclosure_panel.disclosure.attributes import as_attribute_set

THINKING = "Thinking..."
THOUGHT_FOR_SECONDS = "Thought for {{DURATION}} seconds"
THOUGHT_FOR = "Thought for {{DURATION}}"
ANALYZING = "Analyzing..."
ANALYZED = "Analyzed"
EXECUTING = "Executing {{NAME}}..."
VIEW_RESULT = "View Result from {{NAME}}"

_REFERENCE_DATE = datetime(1970, 1, 1)

_HUMANIZE_STEPS = (
    # (upper bound in seconds, unit seconds, singular, plural)
    (45 * 60, 60, "a minute", "minutes"),
    (22 * 3600, 3600, "an hour", "hours"),
    (26 * 86400, 86400, "a day", "days"),
)


def translate(key, placeholders=None):
    """Default lookup: the key is the English text with ``{{NAME}}`` slots."""
    text = key
    for name, value in (placeholders or {}).items():
        text = text.replace("{{" + name + "}}", str(value))
    return text


def humanize_duration(seconds):
    """Describe a duration as a relative phrase such as ``"5 minutes"``.

    Spans of 26 days or more are measured in calendar months from a fixed
    reference date, so month lengths follow the calendar.
    """
    seconds = abs(float(seconds))
    if seconds < 45:
        return "a few seconds"
    for upper, unit, singular, plural in _HUMANIZE_STEPS:
        if seconds < upper:
            count = round(seconds / unit)
            return singular if count <= 1 else f"{count} {plural}"
    span = relativedelta(_REFERENCE_DATE + timedelta(seconds=seconds), _REFERENCE_DATE)
    months = span.years * 12 + span.months + (1 if span.days >= 15 else 0)
    if months < 11:
        return "a month" if months <= 1 else f"{months} months"
    count = round(months / 12)
    return "a year" if count <= 1 else f"{count} years"


def _format_seconds(duration):
    return str(int(duration)) if float(duration).is_integer() else f"{duration:g}"


def summary_label(attributes, title="", translate=translate, humanize=humanize_duration):
    """Pick the header text for a panel from its attributes.

    Reasoning, code interpreter and tool-call panels describe their progress;
    any other panel shows ``title`` verbatim.
    """
    attributes = as_attribute_set(attributes)
    complete = attributes.is_complete
    if attributes.kind == REASONING:
        if complete and attributes.duration is not None:
            if attributes.duration < 60:
                return translate(
                    THOUGHT_FOR_SECONDS,
                    {"DURATION": _format_seconds(attributes.duration)},
                )
            return translate(THOUGHT_FOR, {"DURATION": humanize(attributes.duration)})
        return translate(THINKING, {})
    if attributes.kind == CODE_INTERPRETER:
        return translate(ANALYZED if complete else ANALYZING, {})
    if attributes.kind == TOOL_CALLS:
        key = VIEW_RESULT if complete else EXECUTING
        return translate(key, {"NAME": attributes.name or ""})
    return title
