import logging
import uuid

logger = logging.getLogger(__name__)


class DisclosureController:
    """Open/closed state of a single disclosure panel.

    ``open`` is only a seed: it is read once here and never re-applied, after
    which the state changes only through ``toggle``. Each transition calls
    ``on_change`` with the new value.

    Args:
        open: Initial state.
        disabled: When True, ``toggle`` is ignored.
        on_change: Optional callable invoked with the new open state.
    """

    def __init__(self, open=False, disabled=False, on_change=None):
        self._open = bool(open)
        self.disabled = bool(disabled)
        self.on_change = on_change
        self.collapsible_id = f"collapsible-{uuid.uuid4()}"

    @property
    def is_open(self) -> bool:
        return self._open

    def toggle(self) -> bool:
        """Flip the state unless disabled. Returns True when a transition happened."""
        if self.disabled:
            return False
        self._open = not self._open
        logger.debug("%s is now %s", self.collapsible_id, "open" if self._open else "closed")
        if self.on_change is not None:
            self.on_change(self._open)
        return True
