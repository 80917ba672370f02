import json

import streamlit as st
from langchain.messages import AIMessage
from langchain.messages import HumanMessage
from langchain.messages import ToolMessage

from disclosure_panel.app_config import build_sidebar_config
from disclosure_panel.app_config import configure_logging
from disclosure_panel.app_config import load_config
from disclosure_panel.app_config import reset_panel_state
from disclosure_panel.app_config import should_rebuild_panels
from disclosure_panel.ui.collapsible import CollapsiblePanel
from disclosure_panel.ui.message_attributes import panel_specs_from_messages

_SAMPLE_PNG = (
    "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk"
    "+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg=="
)


def sample_attribute_sets():
    return [
        ("Reasoning", {"type": "reasoning", "done": "true", "duration": "12"}),
        ("Long reasoning", {"type": "reasoning", "done": "true", "duration": "400"}),
        ("Code interpreter", {"type": "code_interpreter", "done": "false"}),
        (
            "Tool call with attachments",
            {
                "type": "tool_calls",
                "done": "true",
                "name": "search",
                "id": "call_1",
                "arguments": json.dumps(json.dumps({"query": "weather"})),
                "result": json.dumps({"status": "ok", "hits": 2}),
                "files": json.dumps(
                    [
                        "data:text/plain;base64,aGVsbG8=",
                        _SAMPLE_PNG,
                        "/static/favicon.png",
                        "https://www.w3.org/WAI/ER/tests/xhtml/testfiles/resources/pdf/dummy.pdf",
                    ]
                ),
            },
        ),
    ]


def sample_transcript():
    return [
        HumanMessage(content="Show me the logo"),
        AIMessage(
            content="",
            additional_kwargs={"reasoning_content": "The user wants the logo image."},
            tool_calls=[{"name": "show_media", "args": {"source": "logo.png"}, "id": "call_2"}],
        ),
        ToolMessage(
            content=json.dumps({"media_content": {"type": "image", "url": _SAMPLE_PNG}}),
            tool_call_id="call_2",
            name="show_media",
        ),
        AIMessage(content="Here is the logo."),
    ]


def build_panels(config):
    panels = []
    for title, attributes in sample_attribute_sets():
        panels.append((CollapsiblePanel(attributes, title=title, chevron=True, config=config), ""))
    for spec in panel_specs_from_messages(sample_transcript()):
        panels.append((CollapsiblePanel(spec.attributes, chevron=True, config=config), spec.body))
    return panels


def main():
    st.set_page_config(page_title="Disclosure panels", page_icon="🧊")
    st.title("Disclosure panels")

    config = build_sidebar_config(load_config())
    configure_logging(config.log_level)
    if should_rebuild_panels(config):
        st.session_state["panels"] = build_panels(config)

    with st.sidebar:
        if st.button("Reset panels"):
            reset_panel_state()
            st.rerun()

    for panel, body in st.session_state["panels"]:
        if body:
            panel.render(content=lambda body=body: st.markdown(body))
        else:
            panel.render()


if __name__ == "__main__":
    main()
