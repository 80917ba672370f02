import asyncio
import logging

import streamlit as st

from disclosure_panel.app_config import PanelConfig
from disclosure_panel.attachments.attachment_resolver import AttachmentResolver
from disclosure_panel.attachments.attachment_resolver import ResolutionState
from disclosure_panel.attachments.content_probe import ContentTypeProber
from disclosure_panel.disclosure.attributes import CODE_INTERPRETER
from disclosure_panel.disclosure.attributes import REASONING
from disclosure_panel.disclosure.attributes import TOOL_CALLS
from disclosure_panel.disclosure.attributes import DoneState
from disclosure_panel.disclosure.attributes import as_attribute_set
from disclosure_panel.disclosure.controller import DisclosureController
from disclosure_panel.disclosure.labels import humanize_duration
from disclosure_panel.disclosure.labels import summary_label
from disclosure_panel.disclosure.labels import translate as default_translate
from disclosure_panel.parsing.json_normalizer import format_json
from disclosure_panel.ui.attachment_renderer import render_attachment
from disclosure_panel.ui.attachment_renderer import render_fallback

logger = logging.getLogger(__name__)

_PROGRESS_KINDS = (REASONING, CODE_INTERPRETER, TOOL_CALLS)
_ICON_OPEN = ":material/expand_more:"
_ICON_CLOSED = ":material/chevron_right:"
_ICON_IN_PROGRESS = ":material/progress_activity:"


class CollapsiblePanel:
    """Streamlit disclosure panel for reasoning, tool calls and attachments.

    Keep one instance per panel in ``st.session_state`` and call ``render``
    on every rerun. The header is a button that toggles the panel; the body
    (shown only while open and not hidden) holds the ``content`` slot, the
    tool-call input/output and one preview per attachment.

    Attachment types are resolved whenever ``files`` changes: the resolver
    probes one attachment at a time and each snapshot redraws the
    placeholder of the attachment that changed, so loading indicators clear
    in list order.

    Args:
        attributes: AttributeSet (or mapping) describing the panel content.
        title: Header text for panels without a known kind.
        open: Initial open state. Read once; later changes are ignored.
        chevron: Show an expand/collapse icon in the header.
        grow: Stretch the header to the container width.
        disabled: Ignore header clicks.
        hide: Never show the body, even when open.
        on_change: Callable invoked with the new open state on every toggle.
        config: PanelConfig with the base URL and probe settings.
        prober: Optional object exposing ``async probe(ref) -> str``.
        translate: ``translate(key, placeholders) -> str`` for header text.
        humanize: ``humanize(seconds) -> str`` for long reasoning durations.
    """

    def __init__(
        self,
        attributes=None,
        title="",
        open=False,
        chevron=False,
        grow=False,
        disabled=False,
        hide=False,
        on_change=None,
        config=None,
        prober=None,
        translate=default_translate,
        humanize=humanize_duration,
    ):
        self.config = config if config is not None else PanelConfig()
        self.controller = DisclosureController(
            open=open, disabled=disabled, on_change=on_change
        )
        self.title = title
        self.chevron = chevron
        self.grow = grow
        self.hide = hide
        self.translate = translate
        self.humanize = humanize
        if prober is None:
            prober = ContentTypeProber(self.config)
        self.resolver = AttachmentResolver(prober)
        self.attributes = as_attribute_set(None)
        self._refs = []
        self._resolved_refs = None
        self._superseded = False
        self.update(attributes)

    @property
    def collapsible_id(self):
        return self.controller.collapsible_id

    @property
    def is_open(self):
        return self.controller.is_open

    @property
    def refs(self):
        return list(self._refs)

    @property
    def state(self) -> ResolutionState:
        return self.resolver.state

    @property
    def needs_resolution(self):
        return self._refs != self._resolved_refs

    def update(self, attributes):
        """Push a new attribute snapshot.

        Returns True when the decoded attachment list differs from the one
        last resolved, i.e. the next ``render`` will re-resolve types.
        """
        self.attributes = as_attribute_set(attributes)
        refs = self.attributes.decoded_files()
        if refs != self._refs:
            self.resolver.supersede()
            self._superseded = True
        self._refs = refs
        return self.needs_resolution

    def set_flags(self, title=None, chevron=None, grow=None, disabled=None, hide=None):
        if title is not None:
            self.title = title
        if chevron is not None:
            self.chevron = chevron
        if grow is not None:
            self.grow = grow
        if disabled is not None:
            self.controller.disabled = bool(disabled)
        if hide is not None:
            self.hide = hide

    def label(self):
        return summary_label(
            self.attributes, self.title, translate=self.translate, humanize=self.humanize
        )

    def resolve_attachments(self, on_change=None) -> ResolutionState:
        """Resolve the current attachment list to completion.

        ``on_change`` receives every intermediate snapshot. An ``update``
        that changes the list while a probe is in flight stops the old run
        after that probe, and the new list is resolved instead. If the run is
        interrupted the list stays marked as unresolved, so the next call
        starts over.
        """
        self.resolver.on_change = on_change
        try:
            while True:
                refs = list(self._refs)
                self._superseded = False
                state = asyncio.run(self.resolver.resolve_all(refs))
                if not self._superseded:
                    break
                logger.debug("Attachment list changed during resolution; resolving again")
        finally:
            self.resolver.on_change = None
        self._resolved_refs = refs
        return state

    def _header_icon(self):
        in_progress = (
            self.attributes.kind in _PROGRESS_KINDS
            and self.attributes.done_state is DoneState.IN_PROGRESS
        )
        if in_progress:
            return _ICON_IN_PROGRESS
        if self.chevron:
            return _ICON_OPEN if self.is_open else _ICON_CLOSED
        return None

    def render(self, default=None, content=None):
        """Render the header, the default slot and, when open, the body."""
        st.button(
            self.label(),
            key=f"{self.collapsible_id}-header",
            on_click=self.controller.toggle,
            disabled=self.controller.disabled,
            icon=self._header_icon(),
            type="tertiary",
            width="stretch" if self.grow else "content",
        )
        if default is not None:
            default()
        if not self.is_open or self.hide:
            if self.needs_resolution:
                # Touching the page per snapshot lets a pending rerun interrupt the run.
                marker = st.empty()
                self.resolve_attachments(on_change=lambda state: marker.empty())
            return
        with st.container(border=True, key=f"{self.collapsible_id}-content"):
            if content is not None:
                content()
            if self.attributes.kind == TOOL_CALLS:
                self._render_tool_call()
            self._render_attachments()

    def _render_tool_call(self):
        attributes = self.attributes
        if attributes.arguments:
            st.caption(self.translate("Input", {}))
            st.code(format_json(attributes.arguments), language="json")
        if attributes.is_complete and attributes.result is not None:
            st.caption(self.translate("Output", {}))
            st.code(format_json(attributes.result), language="json")

    def _render_attachments(self):
        refs = list(self._refs)
        if not refs:
            return
        placeholders = [st.empty() for _ in refs]
        drawn = {}
        base_url = self.config.base_url

        def draw(state):
            if self._refs != refs:
                return
            for idx, ref in enumerate(refs):
                current = (state.mime_type(idx), state.loading(idx))
                if drawn.get(idx) == current:
                    continue
                drawn[idx] = current
                try:
                    with placeholders[idx].container():
                        render_attachment(ref, current[0], current[1], base_url)
                except Exception:
                    logger.warning(
                        "Could not render attachment %d; showing a generic preview",
                        idx,
                        exc_info=True,
                    )
                    with placeholders[idx].container():
                        render_fallback(ref, current[0], base_url)

        if self.needs_resolution:
            state = self.resolve_attachments(on_change=draw)
        else:
            state = self.state
        if self._refs != refs:
            # The list changed while it was being resolved; redraw with the new one.
            st.rerun()
        draw(state)
