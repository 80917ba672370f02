"""Tests for disclosure state, attribute parsing and summary labels."""

import pytest

from disclosure_panel.disclosure.attributes import AttributeSet
from disclosure_panel.disclosure.attributes import DoneState
from disclosure_panel.disclosure.controller import DisclosureController
from disclosure_panel.disclosure.labels import humanize_duration
from disclosure_panel.disclosure.labels import summary_label
from disclosure_panel.disclosure.labels import translate


# ─── DisclosureController ────────────────────────────────────────────────


def test_toggle_notifies_once_with_new_state():
    events = []
    controller = DisclosureController(on_change=events.append)

    assert controller.toggle()
    assert controller.is_open
    assert events == [True]

    controller.toggle()
    assert events == [True, False]


def test_disabled_panel_ignores_toggle():
    events = []
    controller = DisclosureController(disabled=True, on_change=events.append)

    assert not controller.toggle()
    assert not controller.is_open
    assert events == []


def test_open_seed_is_read_once():
    controller = DisclosureController(open=True)
    assert controller.is_open
    controller.toggle()
    assert not controller.is_open


def test_collapsible_ids_are_unique_and_stable():
    first = DisclosureController()
    second = DisclosureController()
    cid = first.collapsible_id
    first.toggle()
    assert first.collapsible_id == cid
    assert first.collapsible_id != second.collapsible_id


# ─── AttributeSet ─────────────────────────────────────────────────────────


def test_done_is_a_tri_state():
    assert AttributeSet().done_state is DoneState.NOT_STARTED
    assert AttributeSet(done="false").done_state is DoneState.IN_PROGRESS
    assert AttributeSet(done="true").done_state is DoneState.COMPLETE


def test_type_key_is_accepted_for_kind():
    assert AttributeSet.model_validate({"type": "reasoning"}).kind == "reasoning"


def test_duration_is_coerced_or_dropped():
    assert AttributeSet(duration="12").duration == 12.0
    assert AttributeSet(duration="soon").duration is None


def test_files_are_decoded_from_nested_json():
    attributes = AttributeSet(files='"[\\"data:text/plain;base64,aGVsbG8=\\", \\"/a.png\\"]"')
    assert attributes.decoded_files() == ["data:text/plain;base64,aGVsbG8=", "/a.png"]


def test_file_records_contribute_their_url():
    attributes = AttributeSet(files=[{"url": "/a"}, 7, "b"])
    assert attributes.decoded_files() == ["/a", "", "b"]


def test_malformed_files_decode_to_empty_list():
    assert AttributeSet(files="[not json").decoded_files() == []
    assert AttributeSet(files='{"url": "/a"}').decoded_files() == []


# ─── Labels ───────────────────────────────────────────────────────────────


def test_reasoning_labels():
    assert summary_label({"kind": "reasoning", "done": "false"}) == "Thinking..."
    assert summary_label({"kind": "reasoning", "done": "true"}) == "Thinking..."
    assert (
        summary_label({"kind": "reasoning", "done": "true", "duration": "12"})
        == "Thought for 12 seconds"
    )
    assert (
        summary_label({"kind": "reasoning", "done": "true", "duration": 300})
        == "Thought for 5 minutes"
    )


def test_code_interpreter_labels():
    assert summary_label({"kind": "code_interpreter"}) == "Analyzing..."
    assert summary_label({"kind": "code_interpreter", "done": "true"}) == "Analyzed"


def test_tool_call_labels():
    assert summary_label({"kind": "tool_calls", "name": "search"}) == "Executing search..."
    assert (
        summary_label({"kind": "tool_calls", "name": "search", "done": "true"})
        == "View Result from search"
    )


def test_generic_panel_shows_title():
    assert summary_label({}, title="Sources") == "Sources"
    assert summary_label({"kind": "something"}, title="Sources") == "Sources"


def test_custom_translate_receives_placeholders():
    calls = []

    def fake_translate(key, placeholders):
        calls.append((key, placeholders))
        return "x"

    summary_label({"kind": "tool_calls", "name": "run"}, translate=fake_translate)
    assert calls == [("Executing {{NAME}}...", {"NAME": "run"})]


def test_translate_substitutes_placeholders():
    assert translate("Hi {{NAME}}", {"NAME": "Ada"}) == "Hi Ada"


@pytest.mark.parametrize(
    "seconds, expected",
    [
        (60, "a minute"),
        (170, "3 minutes"),
        (3000, "an hour"),
        (7200, "2 hours"),
        (86400, "a day"),
        (3 * 86400, "3 days"),
        (60 * 86400, "2 months"),
        (26 * 86400, "a month"),
        (45 * 86400, "a month"),
        (300 * 86400, "10 months"),
        (400 * 86400, "a year"),
        (3 * 365 * 86400, "3 years"),
    ],
)
def test_humanize_duration(seconds, expected):
    assert humanize_duration(seconds) == expected
