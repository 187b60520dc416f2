"""Schema document loading, classification and import resolution.

The document store turns raw text into a :class:`~xsd_outline.models.DocumentSet`:

1. Parse the root text (lxml, entity resolution and network access disabled).
2. Classify it: the root must be ``schema`` (optionally ``xs:``/``xsd:``
   prefixed, any case) and either live in the XML Schema namespace or
   declare an ``xs``/``xsd`` prefix.
3. For schemas, walk the root's ``import``/``include`` directives, locate each
   ``schemaLocation`` hint and load it through the modification-time cache.

Failures never abort the whole load. A broken root document yields a
non-schema result; a broken import is reported and simply left out of the
binding map.

Example:
        from xsd_outline.documents import DocumentStore
        from xsd_outline.files import LocalFileSystem

        store = DocumentStore(LocalFileSystem("/work"))
        result = store.load(open("/work/order.xsd").read(), "/work/order.xsd")
        if result.is_schema:
                print([b.location for b in result.document_set.bindings.values()])
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from lxml import etree

from .cache import DocumentCache
from .errors import ImportResolutionError, SchemaParseError
from .files import FileAccess, LocalFileSystem, SourceText, is_file_location, to_path
from .models import DocumentSet, ImportBinding, SchemaDocument
from .query import XS_NAMESPACE, evaluate, local_name, parse_query

logger = logging.getLogger(__name__)

_SCHEMA_NAME_RE = re.compile(r"(xs:|xsd:)?schema", re.IGNORECASE)
_IMPORT_DIRECTIVES = parse_query("/*/import|include")

Notifier = Callable[[str], None]


def parse_schema_text(
    text: SourceText, location: Optional[str] = None, mtime: Optional[float] = None
) -> SchemaDocument:
    """Parse ``text`` into a :class:`SchemaDocument`.

    ``str`` input is parsed as UTF-8 regardless of any encoding declaration
    (it is already decoded); ``bytes`` honor the declaration.

    Raises:
        SchemaParseError: If the text is not well-formed XML.
    """
    try:
        if isinstance(text, str):
            parser = etree.XMLParser(
                encoding="utf-8", resolve_entities=False, no_network=True
            )
            root = etree.fromstring(text.encode("utf-8"), parser)
        else:
            parser = etree.XMLParser(resolve_entities=False, no_network=True)
            root = etree.fromstring(text, parser)
    except (etree.XMLSyntaxError, ValueError) as e:
        raise SchemaParseError(str(e), location) from e
    return SchemaDocument(root=root, location=location, mtime=mtime)


def is_schema_root(root: etree._Element) -> bool:
    """Classify a parsed root element as an XML Schema ``schema`` element."""
    name = local_name(root)
    qualified = f"{root.prefix}:{name}" if root.prefix else name
    if not _SCHEMA_NAME_RE.fullmatch(qualified):
        return False
    namespace = etree.QName(root).namespace
    declared = root.nsmap
    return namespace == XS_NAMESPACE or "xs" in declared or "xsd" in declared


def classify(text: SourceText) -> bool:
    """Return True when ``text`` parses and its root is a schema element."""
    try:
        return is_schema_root(parse_schema_text(text).root)
    except SchemaParseError:
        return False


@dataclass
class LoadResult:
    """Outcome of loading one root document.

    Attributes:
        document_set: Root plus imports; ``None`` when the root failed to parse.
        is_schema: Classification of the root document.
        errors: Human readable messages for every failure encountered.
    """

    document_set: Optional[DocumentSet]
    is_schema: bool
    errors: List[str] = field(default_factory=list)


class DocumentStore:
    """Load root documents and their imports through a shared mtime cache.

    Args:
        files: File collaborator used for existence checks, reads, stats and
            workspace search.
        cache: Shared :class:`DocumentCache` (a private one is created when
            omitted).
        use_cache: Set False to always reparse imported documents.
        notify: Callback receiving a message for every reported failure.
    """

    def __init__(
        self,
        files: Optional[FileAccess] = None,
        cache: Optional[DocumentCache] = None,
        use_cache: bool = True,
        notify: Optional[Notifier] = None,
    ) -> None:
        self.files = files or LocalFileSystem()
        self.cache = cache if cache is not None else DocumentCache()
        self.use_cache = use_cache
        self.notify = notify

    def load(self, text: SourceText, location: Optional[str] = None) -> LoadResult:
        """Parse ``text``, classify it and, for schemas, resolve its imports."""
        errors: List[str] = []
        try:
            document = parse_schema_text(text, location, self._mtime_of(location))
        except SchemaParseError as e:
            self._report(f"Error parsing document: {e}", errors)
            return LoadResult(document_set=None, is_schema=False, errors=errors)

        document_set = DocumentSet(root=document)
        if not is_schema_root(document.root):
            return LoadResult(document_set=document_set, is_schema=False, errors=errors)

        document_set.bindings = self.load_imports(document, errors)
        return LoadResult(document_set=document_set, is_schema=True, errors=errors)

    def load_imports(
        self, document: SchemaDocument, errors: Optional[List[str]] = None
    ) -> Dict[str, ImportBinding]:
        """Resolve every ``import``/``include`` directive of ``document``.

        A directive whose namespace was already bound replaces the earlier
        binding.
        """
        errors = errors if errors is not None else []
        bindings: Dict[str, ImportBinding] = {}
        for directive in evaluate(_IMPORT_DIRECTIVES, document):
            hint = directive.get("schemaLocation")
            if not hint:
                continue
            try:
                binding = self._load_directive(document, directive, hint, errors)
            except ImportResolutionError as e:
                self._report(str(e), errors)
                continue
            if binding.namespace in bindings:
                logger.info(
                    f"Import of {hint} replaces earlier binding for namespace "
                    f"'{binding.namespace}'"
                )
            bindings[binding.namespace] = binding
        return bindings

    def _load_directive(
        self,
        document: SchemaDocument,
        directive: etree._Element,
        hint: str,
        errors: List[str],
    ) -> ImportBinding:
        location = self.resolve_import_location(document.location, hint)
        if location is None:
            raise ImportResolutionError(hint, "not found")
        imported = self.load_cached(location, errors)
        if imported is None:
            raise ImportResolutionError(hint, "could not be loaded")
        namespace = directive.get("namespace") or ""
        logger.debug(f"Bound namespace '{namespace}' to {location}")
        return ImportBinding(namespace=namespace, document=imported, location=location)

    def resolve_import_location(
        self, base_location: Optional[str], hint: str
    ) -> Optional[str]:
        """Locate an import hint.

        Tries, in order: the hint relative to the base document's directory,
        the hint as an absolute path or ``file:`` URI, then a workspace search
        by filename (first hit).
        """
        if base_location and is_file_location(base_location) and not _is_absolute(hint):
            base_dir = os.path.dirname(str(to_path(base_location)))
            candidate = os.path.normpath(os.path.join(base_dir, hint))
            if self._exists(candidate):
                return candidate

        if _is_absolute(hint):
            candidate = str(to_path(hint))
            if self._exists(candidate):
                return candidate

        try:
            hits = self.files.search_by_filename(f"**/{_search_tail(hint)}")
        except (OSError, ValueError) as e:
            logger.warning(f"Workspace search for {hint} failed: {e}")
            return None
        return hits[0] if hits else None

    def load_cached(
        self, location: str, errors: Optional[List[str]] = None
    ) -> Optional[SchemaDocument]:
        """Load ``location``, reusing the cached parse while its mtime is unchanged.

        Non file-backed locations are always reparsed. Read and parse
        failures are reported and yield ``None``.
        """
        errors = errors if errors is not None else []
        try:
            if not is_file_location(location):
                return parse_schema_text(self.files.read(location), location)

            mtime = self.files.stat(location)
            if self.use_cache:
                cached = self.cache.get(location, mtime)
                if cached is not None:
                    return cached
            document = parse_schema_text(self.files.read(location), location, mtime)
            if self.use_cache:
                self.cache.set(location, document, mtime)
            return document
        except (OSError, SchemaParseError) as e:
            self._report(f"Error loading schema document {location}: {e}", errors)
            return None

    def _exists(self, location: str) -> bool:
        try:
            return self.files.exists(location)
        except OSError:
            return False

    def _mtime_of(self, location: Optional[str]) -> Optional[float]:
        if not is_file_location(location):
            return None
        try:
            return self.files.stat(location)
        except OSError:
            return None

    def _report(self, message: str, errors: List[str]) -> None:
        logger.error(message)
        errors.append(message)
        if self.notify is not None:
            self.notify(message)


def _is_absolute(hint: str) -> bool:
    return hint.startswith("file:") or os.path.isabs(hint)


def _search_tail(hint: str) -> str:
    """Reduce a hint to a glob-safe relative tail ("../a/b.xsd" -> "a/b.xsd")."""
    if "://" in hint:
        hint = hint.rsplit("/", 1)[-1]
    parts = [p for p in hint.replace("\\", "/").split("/") if p not in ("", ".", "..")]
    return "/".join(parts)
