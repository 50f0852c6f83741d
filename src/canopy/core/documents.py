"""
Input trees for rulesets.

A document is an ``xml.etree.ElementTree.ElementTree`` (or a bare root
``Element``). Rules never mutate it; elements are compared by identity.
"""
from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from typing import Any, List, Union

from canopy.core.exceptions import DocumentError

Document = Union[ET.ElementTree, ET.Element]

_BARE_TAG = re.compile(r"[A-Za-z_][\w.\-]*|\*")


def parse_document(source: Union[str, bytes]) -> ET.ElementTree:
    """Parse markup into a document suitable for ``Ruleset.against``."""
    try:
        return ET.ElementTree(ET.fromstring(source))
    except ET.ParseError as exc:
        raise DocumentError(f"Could not parse document: {exc}") from exc


def is_node(value: Any) -> bool:
    return isinstance(value, ET.Element)


def root_of(document: Any) -> ET.Element:
    if isinstance(document, ET.ElementTree):
        root = document.getroot()
        if root is None:
            raise DocumentError("Document has no root element.")
        return root
    if is_node(document):
        return document
    raise DocumentError(
        f"Expected an ElementTree or Element, got {type(document).__name__}.",
        context={"document": document},
    )


def select(document: Any, selector: str) -> List[ET.Element]:
    """Return the elements matching ``selector``, in document order.

    A bare tag name (or ``*``) matches anywhere in the tree, the root included.
    Anything else is an ElementPath expression searched below the root.
    """
    root = root_of(document)
    if _BARE_TAG.fullmatch(selector):
        return list(root.iter(selector))
    path = selector if selector.startswith(".") else ".//" + selector
    try:
        return root.findall(path)
    except SyntaxError as exc:
        raise DocumentError(f"Invalid selector {selector!r}: {exc}", context={"selector": selector}) from exc


__all__ = ["Document", "parse_document", "is_node", "root_of", "select"]
