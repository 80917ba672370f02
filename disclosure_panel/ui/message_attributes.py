"""Build disclosure panel attributes from LangChain chat messages."""

import json
from dataclasses import dataclass
from typing import Any

from disclosure_panel.disclosure.attributes import REASONING
from disclosure_panel.disclosure.attributes import TOOL_CALLS
from disclosure_panel.disclosure.attributes import AttributeSet
from disclosure_panel.parsing.json_normalizer import normalize


@dataclass(frozen=True)
class PanelSpec:
    """Everything needed to render one disclosure panel for a message."""

    attributes: AttributeSet
    body: str = ""


def _block_to_ref(block: Any) -> str | None:
    if not isinstance(block, dict):
        return None
    block_type = block.get("type")
    if block_type in ("image", "audio", "video", "file"):
        if block.get("url"):
            return block["url"]
        if block.get("base64"):
            mime_type = block.get("mime_type") or "application/octet-stream"
            return f"data:{mime_type};base64,{block['base64']}"
    if block_type == "image_url":
        image_url = block.get("image_url") or {}
        if isinstance(image_url, dict) and image_url.get("url"):
            return image_url["url"]
    return None


def extract_file_refs(content: Any) -> list[str]:
    """Collect attachment references from a tool result.

    Understands a ``files`` list or a ``media_content`` object in a (possibly
    JSON-encoded) dict payload, and media blocks in a list of content blocks.
    """
    if isinstance(content, list):
        refs = [_block_to_ref(block) for block in content]
        return [ref for ref in refs if ref]
    payload = normalize(content)
    if not isinstance(payload, dict):
        return []
    files = payload.get("files")
    if isinstance(files, list):
        refs = []
        for item in files:
            if isinstance(item, str):
                refs.append(item)
            elif isinstance(item, dict) and isinstance(item.get("url"), str):
                refs.append(item["url"])
        return refs
    media = payload.get("media_content") or payload.get("MediaContent")
    if isinstance(media, dict) and isinstance(media.get("url"), str):
        return [media["url"]]
    return []


def _content_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        texts = [
            block.get("text", "")
            for block in content
            if isinstance(block, dict) and block.get("type") == "text"
        ]
        if texts:
            return "".join(texts)
    return json.dumps(content, ensure_ascii=False, default=str)


def tool_call_attributes(tool_call, result_msg=None) -> AttributeSet:
    """Describe a tool invocation and, when available, its result.

    Args:
        tool_call: A tool_call dict from an AIMessage, with 'name', 'args'
            and 'id' keys.
        result_msg: The matching ToolMessage, or None while the tool runs.
    """
    attributes = {
        "kind": TOOL_CALLS,
        "id": tool_call.get("id"),
        "name": tool_call.get("name"),
        "arguments": json.dumps(tool_call.get("args") or {}, ensure_ascii=False),
        "done": "false",
    }
    if result_msg is not None:
        attributes["done"] = "true"
        attributes["result"] = _content_text(result_msg.content)
        refs = extract_file_refs(result_msg.content)
        if refs:
            attributes["files"] = json.dumps(refs)
    return AttributeSet.model_validate(attributes)


def reasoning_attributes(duration=None, done=True) -> AttributeSet:
    return AttributeSet(
        kind=REASONING,
        done="true" if done else "false",
        duration=duration,
    )


def panel_specs_from_messages(messages) -> list[PanelSpec]:
    """Turn a LangChain message history into disclosure panels.

    Reasoning attached to AI messages (``additional_kwargs["reasoning_content"]``)
    becomes a reasoning panel. Every tool call becomes a tool-call panel,
    paired with the ToolMessage that carries the same ``tool_call_id``;
    calls without a result are reported as still executing.
    """
    results_by_id = {}
    for msg in messages:
        if msg.type == "tool":
            results_by_id[msg.tool_call_id] = msg
    specs = []
    for msg in messages:
        if msg.type not in ("ai", "assistant"):
            continue
        reasoning = msg.additional_kwargs.get("reasoning_content")
        if reasoning:
            specs.append(PanelSpec(attributes=reasoning_attributes(), body=reasoning))
        for tc in getattr(msg, "tool_calls", []) or []:
            result_msg = results_by_id.get(tc.get("id"))
            specs.append(PanelSpec(attributes=tool_call_attributes(tc, result_msg)))
    return specs
