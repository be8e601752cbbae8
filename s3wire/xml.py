# -*- coding: utf-8 -*-
# s3wire, Python client for Amazon S3 compatible object storage,
# (C) 2026 The s3wire Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
XML capability: parse bytes into a tree and query it with S3 namespace
aware paths. Documents without namespace are queried with plain paths, so
vendors omitting the xmlns attribute are handled transparently.
"""

from __future__ import annotations

import io
from typing import Optional
from xml.etree import ElementTree as ET

S3_NAMESPACE = "http://s3.amazonaws.com/doc/2006-03-01/"


def Element(  # pylint: disable=invalid-name
    tag: str,
    namespace: str = S3_NAMESPACE,
) -> ET.Element:
    """Create root element with tag and default namespace."""
    return ET.Element(tag, {"xmlns": namespace} if namespace else {})


def SubElement(  # pylint: disable=invalid-name
    parent: ET.Element, tag: str, text: Optional[str] = None
) -> ET.Element:
    """Create child element on parent with optional text."""
    element = ET.SubElement(parent, tag)
    if text is not None:
        element.text = text
    return element


def parse(data: bytes | str) -> ET.Element:
    """Parse XML document; raises ValueError on malformed input."""
    try:
        return ET.fromstring(data)
    except ET.ParseError as exc:
        raise ValueError(f"malformed XML document; {exc}") from exc


def _namespace(element: ET.Element) -> str:
    """Namespace URI of element tag, empty if tag is not qualified."""
    if element.tag.startswith("{"):
        return element.tag[1:element.tag.find("}")]
    return ""


def _namespaced(element: ET.Element, path: str) -> tuple[str, dict[str, str]]:
    namespace = _namespace(element)
    if not namespace:
        return path, {}
    tokens = [
        token if token in (".", "..", "") or token.startswith("*")
        else f"s3:{token}"
        for token in path.split("/")
    ]
    return "/".join(tokens), {"s3": namespace}


def localname(element: ET.Element) -> str:
    """Tag of element without namespace."""
    return element.tag.split("}", 1)[-1]


def findall(element: ET.Element, path: str) -> list[ET.Element]:
    """Namespace aware ElementTree.Element.findall()."""
    path, namespaces = _namespaced(element, path)
    return element.findall(path, namespaces=namespaces)


def find(
        element: ET.Element,
        path: str,
        strict: bool = False,
) -> Optional[ET.Element]:
    """Namespace aware ElementTree.Element.find()."""
    qualified, namespaces = _namespaced(element, path)
    elem = element.find(qualified, namespaces=namespaces)
    if strict and elem is None:
        raise ValueError(f"XML element <{path}> not found")
    return elem


def findtext(
        element: ET.Element,
        path: str,
        strict: bool = False,
        default: Optional[str] = None,
) -> Optional[str]:
    """
    Namespace aware ElementTree.Element.findtext(). Missing element gives
    `default`, or ValueError when `strict` is set; an empty element gives
    empty string.
    """
    elem = find(element, path, strict=strict)
    return default if elem is None else (elem.text or "")


def getbytes(element: ET.Element) -> bytes:
    """Serialize element to bytes without XML declaration."""
    with io.BytesIO() as data:
        ET.ElementTree(element).write(
            data,
            encoding=None,
            xml_declaration=False,
        )
        return data.getvalue()
