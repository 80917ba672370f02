import json
import logging
import os
from typing import Literal
from urllib.parse import urlparse

import streamlit as st
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

_ENV_PREFIX = "PANEL_"
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class PanelConfig(BaseModel):
    """Process-wide settings shared by every disclosure panel."""

    base_url: str = Field(
        default="", description="Base address used to resolve relative attachments."
    )
    environment: Literal["development", "production"] = Field(
        default="production",
        description="Development attaches ambient credentials to cross-origin probes.",
    )
    probe_timeout: float = Field(
        default=10.0, gt=0, description="Timeout in seconds for content-type probes."
    )
    cookies: dict[str, str] = Field(
        default_factory=dict, description="Ambient credentials sent with probes."
    )
    log_level: str = "INFO"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    def is_same_origin(self, url: str) -> bool:
        """Return True when ``url`` shares scheme, host and port with ``base_url``."""
        if not self.base_url:
            return False
        base = urlparse(self.base_url)
        target = urlparse(url)
        return (base.scheme, base.netloc) == (target.scheme, target.netloc)


def _read_env(environ):
    raw = {}
    base_url = environ.get(f"{_ENV_PREFIX}BASE_URL")
    if base_url is not None:
        raw["base_url"] = base_url
    environment = environ.get(f"{_ENV_PREFIX}ENV")
    if environment:
        raw["environment"] = environment.strip().lower()
    probe_timeout = environ.get(f"{_ENV_PREFIX}PROBE_TIMEOUT")
    if probe_timeout:
        raw["probe_timeout"] = probe_timeout
    log_level = environ.get(f"{_ENV_PREFIX}LOG_LEVEL")
    if log_level:
        raw["log_level"] = log_level.strip().upper()
    cookies = environ.get(f"{_ENV_PREFIX}COOKIES")
    if cookies:
        try:
            raw["cookies"] = json.loads(cookies)
        except json.JSONDecodeError:
            logger.warning("Ignoring %sCOOKIES: not a JSON object", _ENV_PREFIX)
    return raw


def load_config(environ=None) -> PanelConfig:
    """Build a PanelConfig from ``PANEL_*`` environment variables.

    Each invalid value is dropped with a warning so a bad variable never
    prevents the panel from starting.
    """
    if environ is None:
        environ = os.environ
    raw = _read_env(environ)
    try:
        return PanelConfig(**raw)
    except ValidationError as exc:
        invalid = {str(err["loc"][0]) for err in exc.errors() if err["loc"]}
        logger.warning("Invalid panel settings %s; using defaults", sorted(invalid))
        return PanelConfig(**{k: v for k, v in raw.items() if k not in invalid})


def configure_logging(level="INFO"):
    normalized = str(level or "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, normalized, logging.INFO), format=_LOG_FORMAT
    )


def build_sidebar_config(config: PanelConfig) -> PanelConfig:
    with st.sidebar:
        with st.expander("Panel Settings", expanded=False):
            base_url = st.text_input(
                "Base URL", value=config.base_url, key="panel_base_url"
            )
            environment = st.selectbox(
                "Environment",
                ["production", "development"],
                index=0 if config.environment == "production" else 1,
                key="panel_environment",
            )
            probe_timeout = st.number_input(
                "Probe timeout (seconds)",
                min_value=0.5,
                max_value=120.0,
                value=float(config.probe_timeout),
                step=0.5,
            )
            return config.model_copy(
                update={
                    "base_url": base_url.strip(),
                    "environment": environment,
                    "probe_timeout": float(probe_timeout),
                }
            )


def should_rebuild_panels(config):
    current = st.session_state.get("panel_config")
    if current is None:
        st.session_state["panel_config"] = config
        return True
    if current != config:
        st.session_state["panel_config"] = config
        return True
    return "panels" not in st.session_state


def reset_panel_state():
    st.session_state.pop("panels", None)
    st.session_state.pop("panel_config", None)
