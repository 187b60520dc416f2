"""Occurrence badges and nillable hints keyed by tree node id.

The store is an ordinary object owned by whoever renders the outline (see
:class:`~xsd_outline.outline.SchemaOutline`) and passed by reference to the
layer that publishes decorations. Listeners are told which node ids changed
so a UI can repaint just those rows.

Badge format is two characters, minimum then maximum:

=============  ==========  =====
minOccurs      maxOccurs   badge
=============  ==========  =====
``0``          unbounded   ``0∞``
``1``          ``5``       ``1N``
(unset)        unbounded   ``1∞``
``1``          ``1``       (none)
(unset)        (unset)     (none)
=============  ==========  =====

Example:
        store = DecorationStore()
        store.update_occurrences("//schema/element[@name='Order']#0", "0", "unbounded")
        store.get("//schema/element[@name='Order']#0").badge   # -> "0∞"
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

MUTED_COLOR = "disabledForeground"

Listener = Callable[[List[str]], None]


@dataclass(frozen=True)
class Decoration:
    """What a renderer should draw next to a node.

    Attributes:
        badge: Two character occurrence badge, ``None`` when suppressed.
        tooltip: ``minOccurs: 0 • maxOccurs: unbounded`` style text, or
            ``Nillable`` for nillable-only nodes.
        nillable: Node is declared ``nillable="true"``.
        color: Theme color for the muted nillable hint.
    """

    badge: Optional[str] = None
    tooltip: Optional[str] = None
    nillable: bool = False
    color: Optional[str] = None


def occurrence_badge(
    min_occurs: Optional[str], max_occurs: Optional[str]
) -> Optional[Tuple[str, str]]:
    """Return ``(badge, tooltip)`` for an occurrence pair, ``None`` when suppressed."""
    if (not min_occurs and not max_occurs) or (min_occurs == "1" and max_occurs == "1"):
        return None
    tooltip_parts: List[str] = []
    min_badge = "1"
    if min_occurs:
        tooltip_parts.append(f"minOccurs: {min_occurs}")
        min_badge = min_occurs if min_occurs in ("0", "1") else "N"
    max_badge = "1"
    if max_occurs:
        tooltip_parts.append(f"maxOccurs: {max_occurs}")
        if max_occurs == "unbounded":
            max_badge = "∞"
        elif max_occurs != "1":
            max_badge = "N"
    return f"{min_badge}{max_badge}", " • ".join(tooltip_parts)


class DecorationStore:
    """Per-node decoration state with change notifications."""

    def __init__(self) -> None:
        self._occurrences: Dict[str, Tuple[Optional[str], Optional[str]]] = {}
        self._nillable: Dict[str, bool] = {}
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update_occurrences(
        self, node_id: str, min_occurs: Optional[str], max_occurs: Optional[str]
    ) -> bool:
        """Record an occurrence pair; returns False when it is suppressed."""
        if occurrence_badge(min_occurs, max_occurs) is None:
            return False
        with self._lock:
            self._occurrences[node_id] = (min_occurs, max_occurs)
        self._fire([node_id])
        return True

    def update_nillable(self, node_id: str, nillable: bool) -> None:
        with self._lock:
            if self._nillable.get(node_id) == nillable:
                return
            self._nillable[node_id] = nillable
        self._fire([node_id])

    def clear_occurrences(self, node_id: Optional[str] = None) -> None:
        with self._lock:
            if node_id is None:
                changed = list(self._occurrences)
                self._occurrences.clear()
            else:
                changed = [node_id] if self._occurrences.pop(node_id, None) else []
        self._fire(changed)

    def clear_nillable(self, node_id: Optional[str] = None) -> None:
        with self._lock:
            if node_id is None:
                changed = list(self._nillable)
                self._nillable.clear()
            else:
                changed = [node_id] if self._nillable.pop(node_id, None) is not None else []
        self._fire(changed)

    def clear(self) -> None:
        self.clear_occurrences()
        self.clear_nillable()

    def get(self, node_id: str) -> Optional[Decoration]:
        """Decoration for ``node_id`` or ``None`` when nothing applies."""
        with self._lock:
            occurrences = self._occurrences.get(node_id)
            nillable = self._nillable.get(node_id, False)
        if occurrences is not None:
            badge, tooltip = occurrence_badge(*occurrences)
            return Decoration(
                badge=badge,
                tooltip=tooltip,
                nillable=nillable,
                color=MUTED_COLOR if nillable else None,
            )
        if nillable:
            return Decoration(tooltip="Nillable", nillable=True, color=MUTED_COLOR)
        return None

    def _fire(self, node_ids: List[str]) -> None:
        if not node_ids:
            return
        for listener in list(self._listeners):
            listener(node_ids)
