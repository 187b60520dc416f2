"""Host-facing outline service.

:class:`SchemaOutline` is what an editor integration, the HTTP API or the CLI
talks to. The host feeds it the active document's text whenever something
happens (editor switched, text edited, user pressed refresh) and reads the
tree back through :meth:`SchemaOutline.get_children` and
:meth:`SchemaOutline.get_tree_item`.

Recomputes publish complete :class:`OutlineSnapshot` objects. Each recompute
takes a generation number when it starts; if a newer recompute began while
an older one was still loading imports, the older result is dropped instead
of overwriting the newer one.

Example:
        outline = SchemaOutline(config=OutlineConfig.from_env())
        outline.subscribe(lambda snapshot: print("outline changed", snapshot.generation))
        outline.update(text, location="/work/order.xsd")
        for i, node in enumerate(outline.get_children()):
                item = outline.get_tree_item(node, i)
                print(item.label, item.description, outline.decorations.get(item.node_id))
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .cache import DocumentCache
from .config import OutlineConfig
from .decorations import DecorationStore
from .documents import DocumentStore
from .files import FileAccess, LocalFileSystem, SourceText
from .locator import NodeLocator, line_of
from .models import DocumentSet, NavigationTarget, SchemaNode, TreeItem
from .presentation import TreeItemFactory
from .query import QueryEngine
from .tree import TreeBuilder
from .type_resolver import TypeResolver

logger = logging.getLogger(__name__)

Notifier = Callable[[str], None]
Subscriber = Callable[[Optional["OutlineSnapshot"]], None]


@dataclass
class OutlineSnapshot:
    """Everything derived from one version of the source text.

    Attributes:
        generation: Recompute number that produced the snapshot.
        location: Location of the root document (``None`` for buffers).
        is_schema: Whether the root document was classified as a schema.
        document_set: Loaded documents (``None`` when the root failed to parse).
        errors: Messages reported while loading.
    """

    generation: int
    location: Optional[str]
    is_schema: bool
    document_set: Optional[DocumentSet] = None
    errors: List[str] = field(default_factory=list)
    builder: Optional[TreeBuilder] = None
    locator: Optional[NodeLocator] = None
    items: Optional[TreeItemFactory] = None


class SchemaOutline:
    """Recompute entry point plus tree, navigation and decoration queries.

    Args:
        files: File collaborator; defaults to :class:`LocalFileSystem` rooted
            at ``config.workspace_root``.
        config: Outline configuration (defaults are used when omitted).
        decorations: Decoration store shared with the renderer; a private one
            is created when omitted.
        notify: Callback receiving every user-facing failure message.
        cache: Imported document cache, shareable between outlines.
    """

    def __init__(
        self,
        files: Optional[FileAccess] = None,
        config: Optional[OutlineConfig] = None,
        decorations: Optional[DecorationStore] = None,
        notify: Optional[Notifier] = None,
        cache: Optional[DocumentCache] = None,
    ) -> None:
        self.config = config or OutlineConfig()
        self.files = files or LocalFileSystem(
            self.config.workspace_root,
            max_results=self.config.search_max_results,
            timeout=self.config.search_timeout,
        )
        self.decorations = decorations if decorations is not None else DecorationStore()
        self.notify = notify
        self.store = DocumentStore(
            self.files, cache=cache, use_cache=self.config.cache_imports, notify=notify
        )
        self._subscribers: List[Subscriber] = []
        self._lock = threading.Lock()
        self._generation = 0
        self._text: Optional[SourceText] = None
        self._location: Optional[str] = None
        self._snapshot: Optional[OutlineSnapshot] = None

    # ---------------- Recompute ---------------- #

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Call ``subscriber`` with every published snapshot (and ``reset``)."""
        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    def update(
        self, text: Optional[SourceText], location: Optional[str] = None, force: bool = False
    ) -> bool:
        """Rebuild the outline for the active document if needed.

        A rebuild happens when ``force`` is set, when ``location`` differs
        from the current document, or when the text changed and
        ``autorefresh`` is enabled. Passing ``text=None`` means there is no
        active schema-capable document and resets the outline.

        Returns:
            True if a new snapshot was published.
        """
        if text is None:
            self.reset()
            return False

        with self._lock:
            same_document = self._snapshot is not None and location == self._location
            if same_document and not force:
                if text == self._text:
                    return False
                if not self.config.autorefresh:
                    # kept for the next explicit refresh
                    self._text = text
                    return False
            self._generation += 1
            generation = self._generation
            self._text = text
            self._location = location

        snapshot = self._build(text, location, generation)

        with self._lock:
            if generation != self._generation:
                logger.debug(
                    f"Dropping outline generation {generation}; "
                    f"generation {self._generation} is newer"
                )
                return False
            self._snapshot = snapshot
            self.decorations.clear()
        logger.info(
            f"Outline generation {generation} for {location or '<memory>'}: "
            f"schema={snapshot.is_schema}, imports="
            f"{len(snapshot.document_set.bindings) if snapshot.document_set else 0}"
        )
        self._publish(snapshot)
        return True

    def refresh(self, text: Optional[SourceText] = None) -> bool:
        """Force a rebuild from ``text`` or the last text seen."""
        if text is None:
            text = self._text
        if text is None:
            return False
        return self.update(text, self._location, force=True)

    def reset(self) -> None:
        """Forget the active document, its tree and all decorations."""
        with self._lock:
            self._generation += 1
            was_schema = self._snapshot is not None and self._snapshot.is_schema
            self._snapshot = None
            self._text = None
            self._location = None
            self.decorations.clear()
        if was_schema:
            self._publish(None)

    def _build(
        self, text: SourceText, location: Optional[str], generation: int
    ) -> OutlineSnapshot:
        result = self.store.load(text, location)
        snapshot = OutlineSnapshot(
            generation=generation,
            location=location,
            is_schema=result.is_schema,
            document_set=result.document_set,
            errors=result.errors,
        )
        if result.is_schema and result.document_set is not None:
            engine = QueryEngine(result.document_set)
            resolver = TypeResolver(engine)
            snapshot.builder = TreeBuilder(
                result.document_set, engine, resolver, notify=self._report_to(snapshot)
            )
            snapshot.locator = NodeLocator(engine)
            snapshot.items = TreeItemFactory(resolver, self.decorations)
        return snapshot

    def _report_to(self, snapshot: OutlineSnapshot) -> Notifier:
        def report(message: str) -> None:
            snapshot.errors.append(message)
            if self.notify is not None:
                self.notify(message)

        return report

    def _publish(self, snapshot: Optional[OutlineSnapshot]) -> None:
        for subscriber in list(self._subscribers):
            subscriber(snapshot)

    # ---------------- Queries ---------------- #

    @property
    def snapshot(self) -> Optional[OutlineSnapshot]:
        return self._snapshot

    @property
    def is_schema(self) -> bool:
        snapshot = self._snapshot
        return snapshot is not None and snapshot.is_schema

    @property
    def location(self) -> Optional[str]:
        return self._location

    def get_children(self, node: Optional[SchemaNode] = None) -> List[SchemaNode]:
        """Root nodes when ``node`` is None, else the node's children."""
        builder = self._builder()
        if builder is None:
            return []
        if node is None:
            return builder.get_root_nodes()
        return builder.get_children(node)

    def get_tree_item(self, node: SchemaNode, ordinal: int = 0) -> TreeItem:
        """Render ``node``; ``ordinal`` is its position among its siblings."""
        snapshot = self._snapshot
        if snapshot is None or snapshot.items is None:
            raise LookupError("No schema outline is loaded")
        return snapshot.items.create(node, ordinal)

    def build_tree(self, node: Optional[SchemaNode] = None, depth: int = 1) -> List[TreeItem]:
        """Render the children of ``node`` (roots by default) ``depth`` levels deep.

        Expansion is bounded by ``depth``; a ``depth`` of 0 renders nothing.
        """
        if depth <= 0:
            return []
        items: List[TreeItem] = []
        for ordinal, child in enumerate(self.get_children(node)):
            item = self.get_tree_item(child, ordinal)
            if child.has_children and depth > 1:
                item.children = self.build_tree(child, depth - 1)
            items.append(item)
        return items

    def find_node(self, locator: str) -> Optional[SchemaNode]:
        """Resolve ``locator`` and wrap the construct it names as a node."""
        snapshot = self._snapshot
        if snapshot is None or snapshot.locator is None or snapshot.builder is None:
            return None
        resolved = snapshot.locator.resolve(locator)
        if resolved is None:
            return None
        construct, _ = resolved
        return snapshot.builder.node_for(construct)

    def focus(self, locator: Optional[str]) -> Optional[NavigationTarget]:
        """Resolve ``locator`` to an owning location and zero-based line.

        Failures are reported and return ``None``; no state changes.
        """
        snapshot = self._snapshot
        if not locator or snapshot is None or snapshot.locator is None:
            self._report(f"Element not found: {locator}")
            return None
        resolved = snapshot.locator.resolve(locator)
        if resolved is None:
            self._report(f"Element not found: {locator}")
            return None
        construct, document = resolved
        return NavigationTarget(
            location=document.location,
            line=line_of(construct),
            locator=locator,
            name=construct.get("name") or construct.get("value"),
        )

    @staticmethod
    def copy_name(node: Optional[SchemaNode]) -> str:
        """Text a "copy name" action puts on the clipboard ('' without a node)."""
        if node is None or not isinstance(node.name, str):
            return ""
        return node.name

    def _builder(self) -> Optional[TreeBuilder]:
        snapshot = self._snapshot
        return snapshot.builder if snapshot is not None else None

    def _report(self, message: str) -> None:
        logger.warning(message)
        if self.notify is not None:
            self.notify(message)
