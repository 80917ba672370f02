"""Sequential MIME-type resolution for a panel's attachment list."""

import asyncio
import logging
from dataclasses import dataclass
from dataclasses import field
from types import MappingProxyType
from typing import Mapping

from disclosure_panel.attachments.url_classifier import extract_inline_mime_type
from disclosure_panel.attachments.url_classifier import is_inline_data

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionState:
    """Immutable snapshot of per-attachment resolution progress.

    Attributes:
        mime_types: Resolved MIME type per attachment index. An empty string
            means unresolved, or resolved to an unknown type.
        is_loading: True for the index whose probe is currently in flight.
        generation: Resolution run that produced this snapshot.
    """

    mime_types: Mapping[int, str] = field(default_factory=dict)
    is_loading: Mapping[int, bool] = field(default_factory=dict)
    generation: int = 0

    def mime_type(self, index: int) -> str:
        return self.mime_types.get(index, "")

    def loading(self, index: int) -> bool:
        return self.is_loading.get(index, False)

    @property
    def loading_count(self) -> int:
        return sum(1 for value in self.is_loading.values() if value)


class AttachmentResolver:
    """Resolve attachment MIME types one index at a time.

    Remote attachments are probed strictly in order: the loading flag of an
    index is set before its probe starts and cleared before the next index is
    considered, so at most one probe is in flight per panel. Each call to
    ``resolve_all`` starts a new generation; a flow from an older generation
    stops writing as soon as it notices it has been superseded.

    Args:
        prober: Object exposing ``async probe(ref) -> str``.
        on_change: Optional callable invoked with a fresh ``ResolutionState``
            after every mutation.
    """

    def __init__(self, prober, on_change=None):
        self.prober = prober
        self.on_change = on_change
        self._generation = 0
        self._mime_types: dict[int, str] = {}
        self._is_loading: dict[int, bool] = {}
        self._task = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def state(self) -> ResolutionState:
        return ResolutionState(
            mime_types=MappingProxyType(dict(self._mime_types)),
            is_loading=MappingProxyType(dict(self._is_loading)),
            generation=self._generation,
        )

    def _notify(self):
        if self.on_change is not None:
            self.on_change(self.state)

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def resolve_all(self, refs) -> ResolutionState:
        """Resolve every reference in ``refs`` and return the final snapshot.

        Discards the state of any previous run. If a newer run starts while
        this one is awaiting a probe, this run returns without touching the
        newer run's state.
        """
        refs = list(refs or [])
        self._generation += 1
        generation = self._generation
        self._mime_types = {idx: "" for idx in range(len(refs))}
        self._is_loading = {idx: False for idx in range(len(refs))}
        self._notify()

        for idx, ref in enumerate(refs):
            if not self._is_current(generation):
                break
            if not ref:
                continue
            if is_inline_data(ref):
                self._mime_types[idx] = extract_inline_mime_type(ref)
                self._notify()
                continue
            self._is_loading[idx] = True
            self._notify()
            mime_type = await self.prober.probe(ref)
            if not self._is_current(generation):
                logger.debug("Dropping superseded probe result for index %d", idx)
                break
            self._mime_types[idx] = mime_type or ""
            self._is_loading[idx] = False
            logger.debug("Resolved attachment %d as %r", idx, self._mime_types[idx])
            self._notify()
        return self.state

    def supersede(self):
        """Invalidate the run in flight without starting a new one.

        The running flow stops after its current probe returns; a task started
        by ``schedule`` is cancelled outright.
        """
        self._generation += 1
        if self._task is not None and not self._task.done():
            logger.debug("Cancelling attachment resolution for generation %d", self._generation)
            self._task.cancel()

    def schedule(self, refs) -> asyncio.Task:
        """Start resolving ``refs`` in the running loop, superseding any run in flight."""
        if self._task is not None and not self._task.done():
            logger.debug("Cancelling attachment resolution for generation %d", self._generation)
            self._task.cancel()
        self._task = asyncio.get_running_loop().create_task(self.resolve_all(refs))
        return self._task
