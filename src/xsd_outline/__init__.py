"""XSD Outline
===========

Turns a W3C XML Schema document into a lazily expanded outline tree of its
elements, choice groups and enumeration values, with type resolution across
imported and included files and stable locators that lead back to source.

Key capabilities
----------------
- Namespace-agnostic structural queries over a root schema and its imports
  (:mod:`xsd_outline.query`).
- Base-type resolution and enumeration detection
  (:class:`~xsd_outline.type_resolver.TypeResolver`).
- On-demand child computation merging inline types, named types and
  extension inheritance (:class:`~xsd_outline.tree.TreeBuilder`).
- Occurrence badges and nillable hints keyed by node id
  (:class:`~xsd_outline.decorations.DecorationStore`).
- An HTTP API (FastAPI) and a small CLI on top of
  :class:`~xsd_outline.outline.SchemaOutline`.

Minimal quick start
-------------------
>>> from xsd_outline import SchemaOutline
>>> outline = SchemaOutline()
>>> outline.update(open('/path/to/order.xsd', 'rb').read(), '/path/to/order.xsd')
>>> [node.name for node in outline.get_children()]

FastAPI application instance (for ASGI servers like uvicorn):
>>> from xsd_outline.app import app  # noqa: F401
"""

__version__ = "0.1.0"

from .config import OutlineConfig
from .decorations import DecorationStore
from .documents import DocumentStore, classify
from .errors import (
    ImportResolutionError,
    QuerySyntaxError,
    SchemaParseError,
    TypeResolutionError,
    XsdOutlineError,
)
from .models import NavigationTarget, SchemaNode, TreeItem
from .outline import SchemaOutline

__all__ = [
    "DecorationStore",
    "DocumentStore",
    "ImportResolutionError",
    "NavigationTarget",
    "OutlineConfig",
    "QuerySyntaxError",
    "SchemaNode",
    "SchemaOutline",
    "SchemaParseError",
    "TreeItem",
    "TypeResolutionError",
    "XsdOutlineError",
    "classify",
]
