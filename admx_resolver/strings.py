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
StringTable - localized ADML resources and $(kind.id) template expansion
"""

import logging
from collections.abc import Iterator, Mapping
import xml.etree.ElementTree as ET

from .elements import attr, children, parse_xml, sections
from .errors import ResourceLoadFailure, UnresolvedStringReference

logger = logging.getLogger('admx_resolver')

STRING = "string"
PRESENTATION = "presentation"
KINDS = (STRING, PRESENTATION)

# scanner states of expand_template
OUTSIDE = 0
INSIDE = 1


class StringTable(Mapping):
    """
    Lookup of ADML resources keyed by (kind, id).

    String entries hold the literal <string> text. Presentation entries hold
    an empty value: a template may name a presentation, only its presence
    matters.
    """

    def __init__(self, entries: Mapping[tuple[str, str], str] | None = None):
        self._entries = dict(entries or {})

    def __getitem__(self, key: tuple[str, str]) -> str:
        return self._entries[key]

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"StringTable({len(self)} entries)"

    def resolve(self, kind: str, ident: str) -> str:
        try:
            return self._entries[(kind, ident)]
        except KeyError:
            raise UnresolvedStringReference(ident if kind == STRING else f"{kind}.{ident}") from None


def load_string_table(content: bytes, resource_path: str) -> StringTable:
    """
    Load all <string id="..."> and <presentation id="..."> entries of an ADML file.

    Raises:
        ResourceLoadFailure: the content is not well-formed XML
    """
    try:
        root = parse_xml(content)
    except ET.ParseError as e:
        raise ResourceLoadFailure(resource_path, f"parse error: {e}") from e

    entries: dict[tuple[str, str], str] = {}

    for table in sections(root, "stringTable"):
        for el in children(table, "string"):
            sid = attr(el, "id")
            if sid:
                entries[(STRING, sid)] = el.text or ""

    for table in sections(root, "presentationTable"):
        for el in children(table, "presentation"):
            pid = attr(el, "id")
            if pid:
                entries[(PRESENTATION, pid)] = ""

    logger.debug(f"Loaded {len(entries)} resource entries from {resource_path}")
    return StringTable(entries)


def expand_template(template: str, table: StringTable,
                    path: str | None = None, element_id: str | None = None) -> str:
    """
    Substitute every $(kind.id) token of template with its table value.

    The template is scanned once with two states: outside a token, where
    characters are copied, and inside a token, entered on "$(" and left on
    ")". Substituted values are not scanned again. A "$(" still open at the
    end of the template is an unresolved reference.

    Raises:
        UnresolvedStringReference: a token names an entry absent from table
            or uses an unknown kind, or a "$(" is never closed
    """
    out = []
    token = []
    state = OUTSIDE
    token_start = 0
    i = 0
    n = len(template)
    while i < n:
        ch = template[i]
        if state == OUTSIDE:
            if ch == "$" and template.startswith("(", i + 1):
                state = INSIDE
                token = []
                token_start = i
                i += 2
                continue
            out.append(ch)
        elif ch == ")":
            out.append(_lookup_token("".join(token), table, path, element_id))
            state = OUTSIDE
        else:
            token.append(ch)
        i += 1

    if state == INSIDE:
        partial = "".join(token).strip() or template[token_start:]
        raise UnresolvedStringReference(partial, path, element_id)

    return "".join(out)


def _lookup_token(token: str, table: StringTable,
                  path: str | None, element_id: str | None) -> str:
    kind, sep, ident = token.partition(".")
    kind = kind.strip().lower()
    ident = ident.strip()
    if not sep or kind not in KINDS or not ident:
        raise UnresolvedStringReference(token, path, element_id)
    try:
        return table.resolve(kind, ident)
    except UnresolvedStringReference as e:
        raise e.bind(path, element_id) from None
