"""Documentation text attached to schema constructs."""

from __future__ import annotations

from typing import List, Optional

from lxml import etree

from .query import local_name


def get_documentation(element: etree._Element) -> Optional[str]:
    """Return the trimmed text of the first ``annotation``'s ``documentation`` children.

    Returns ``None`` when there is no annotation or it has no documentation.
    """
    annotation = next(
        (child for child in element.iterchildren() if local_name(child) == "annotation"),
        None,
    )
    if annotation is None:
        return None
    documentation = [
        child for child in annotation.iterchildren() if local_name(child) == "documentation"
    ]
    if not documentation:
        return None
    return "".join(text_content(doc) for doc in documentation).strip()


def text_content(element: etree._Element) -> str:
    """Concatenated character data of ``element`` and its descendants.

    Comment and processing-instruction text is skipped; their tails are kept.
    """
    parts: List[str] = [element.text or ""]
    for child in element:
        if isinstance(child.tag, str):
            parts.append(text_content(child))
        parts.append(child.tail or "")
    return "".join(parts)
