#
# admx-resolver - ADMX/ADML Policy Definition Resolver
#
# Copyright (C) 2025 BaseALT Ltd.
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.
"""
Namespace-agnostic ElementTree helpers shared by the ADMX and ADML readers.
"""

import re
from collections.abc import Iterator
import xml.etree.ElementTree as ET


# Some vendor templates declare encoding="unicode", which expat rejects
UNICODE_DECLARATION = re.compile(
    r"""^\s*<\?xml[^>]*encoding\s*=\s*(['"])unicode\1[^>]*\?>""", re.IGNORECASE)


def parse_xml(content: bytes) -> ET.Element:
    """
    Parse an ADMX/ADML document.

    Raises:
        ET.ParseError: content is not well-formed XML
    """
    try:
        return ET.fromstring(content)
    except (ET.ParseError, LookupError) as e:
        text = _strip_unicode_declaration(content)
        if text is None:
            raise ET.ParseError(str(e)) from e
        return ET.fromstring(text)


def _strip_unicode_declaration(raw: bytes) -> str | None:
    for encoding in ("utf-8-sig", "utf-16", "utf-16-le", "utf-16-be"):
        try:
            text = raw.decode(encoding)
        except UnicodeDecodeError:
            continue
        if UNICODE_DECLARATION.search(text):
            return UNICODE_DECLARATION.sub("", text, count=1)
    return None


def strip_ns(tag: str) -> str:
    """Remove XML namespace from tag."""
    return tag.split("}", 1)[-1]


def children(parent: ET.Element, local: str) -> Iterator[ET.Element]:
    """Yield direct children of parent whose local tag name is local."""
    for ch in parent:
        if strip_ns(ch.tag) == local:
            yield ch


def first_child(parent: ET.Element, local: str) -> ET.Element | None:
    return next(children(parent, local), None)


def sections(root: ET.Element, local: str) -> Iterator[ET.Element]:
    """Yield every element named local anywhere below root, root included."""
    for el in root.iter():
        if strip_ns(el.tag) == local:
            yield el


def attr(el: ET.Element, name: str) -> str | None:
    """Return a stripped attribute value, None when absent or blank."""
    value = el.attrib.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None
