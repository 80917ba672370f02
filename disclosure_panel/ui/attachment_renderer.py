"""Helpers for choosing and rendering attachment previews in Streamlit."""

from enum import Enum
from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse

import streamlit as st
import streamlit.components.v1 as components

from disclosure_panel.attachments.url_classifier import decode_inline_text
from disclosure_panel.attachments.url_classifier import is_inline_data
from disclosure_panel.attachments.url_classifier import resolve

INLINE_PREVIEW_CHARS = 100
DOCUMENT_VIEWER_HEIGHT = 600


class AttachmentView(str, Enum):
    LOADING = "loading"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    DOCUMENT = "document"
    TEXT = "text"
    FALLBACK = "fallback"
    NONE = "none"


def select_view(ref, mime_type, is_loading) -> AttachmentView:
    """Pick exactly one presentation for an attachment.

    The checks run in a fixed order and only look at the loading flag and the
    resolved MIME type; file names and extensions are never consulted.
    """
    if is_loading:
        return AttachmentView.LOADING
    mime_type = (mime_type or "").lower()
    if mime_type.startswith("image/"):
        return AttachmentView.IMAGE
    if mime_type.startswith("audio/"):
        return AttachmentView.AUDIO
    if mime_type.startswith("video/"):
        return AttachmentView.VIDEO
    if "pdf" in mime_type:
        return AttachmentView.DOCUMENT
    if mime_type.startswith("text/") or "json" in mime_type or "xml" in mime_type:
        return AttachmentView.TEXT
    if ref:
        return AttachmentView.FALLBACK
    return AttachmentView.NONE


def attachment_label(url: str) -> str:
    """Return a short display name for a remote attachment."""
    name = PurePosixPath(unquote(urlparse(url).path)).name
    return name or url


def inline_preview(ref: str) -> str:
    if len(ref) <= INLINE_PREVIEW_CHARS:
        return ref
    return ref[:INLINE_PREVIEW_CHARS] + "..."


def _media_source(ref, url):
    # Streamlit accepts data: URIs as URLs, so inline payloads are never decoded here.
    return ref if is_inline_data(ref) else url


def render_fallback(ref, mime_type, base_url=""):
    """Draw the generic preview: type caption and snippet inline, download link otherwise."""
    if is_inline_data(ref):
        st.caption(mime_type or "Unknown type")
        st.text(inline_preview(ref))
        return
    url = resolve(ref, base_url)
    st.markdown(f":material/download: [Download {attachment_label(url)}]({url})")


def render_attachment(ref, mime_type, is_loading, base_url="") -> AttachmentView:
    """Render one attachment via Streamlit and return the view that was used."""
    view = select_view(ref, mime_type, is_loading)
    if view is AttachmentView.NONE:
        return view
    url = resolve(ref, base_url)
    inline = is_inline_data(ref)
    if view is AttachmentView.LOADING:
        st.caption(":material/hourglass_empty: Loading attachment...")
    elif view is AttachmentView.IMAGE:
        st.image(_media_source(ref, url))
        if not inline:
            st.caption(attachment_label(url))
    elif view is AttachmentView.AUDIO:
        st.audio(_media_source(ref, url), format=mime_type)
    elif view is AttachmentView.VIDEO:
        st.video(_media_source(ref, url), format=mime_type)
    elif view is AttachmentView.DOCUMENT:
        components.iframe(url, height=DOCUMENT_VIEWER_HEIGHT)
    elif view is AttachmentView.TEXT:
        if inline:
            st.code(decode_inline_text(ref), language=None)
        else:
            st.markdown(f":material/open_in_new: [{attachment_label(url)}]({url})")
    else:
        render_fallback(ref, mime_type, base_url)
    return view
