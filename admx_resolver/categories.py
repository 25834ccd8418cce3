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
Category graph of a template store.

Built in two passes. collect_categories() reads the <categories> section of
every template and merges the records into one mapping keyed by qualified
identifier. CategoryGraph then resolves parent references by lookup into
that mapping; references to categories defined in templates absent from the
store stay unresolved.
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from .elements import attr, children, first_child, sections
from .errors import AdmxError
from .strings import expand_template
from .templates import ParsedTemplate

logger = logging.getLogger('admx_resolver')

PATH_SEPARATOR = "\\"


@dataclass(frozen=True)
class Category:
    identifier: str
    display_name: str
    parent_identifier: str | None = None
    source: str | None = None


def parse_categories(template: ParsedTemplate) -> tuple[list[Category], list[AdmxError]]:
    """Parse the categories declared by a single template."""
    categories = []
    problems = []
    ns = template.namespaces

    for block in sections(template.root, "categories"):
        for cat in children(block, "category"):
            name = attr(cat, "name")
            if not name:
                continue

            try:
                identifier = f"{ns.target}.{name}"

                parent = None
                parent_el = first_child(cat, "parentCategory")
                if parent_el is not None:
                    ref = attr(parent_el, "ref")
                    if ref:
                        parent = ns.qualify(ref, name)

                raw_display = cat.attrib.get("displayName")
                if raw_display is None:
                    display_name = name
                else:
                    display_name = expand_template(raw_display, template.strings,
                                                   template.path, name)
            except AdmxError as e:
                logger.warning(f"Skipping category: {e}")
                problems.append(e)
                continue

            categories.append(Category(identifier=identifier,
                                       display_name=display_name,
                                       parent_identifier=parent,
                                       source=template.path))

    return categories, problems


def collect_categories(templates: Iterable[ParsedTemplate]) -> tuple[dict[str, Category], list[AdmxError]]:
    """
    Merge the categories of all templates, in template order.

    A later definition of an identifier replaces the earlier one.
    """
    merged: dict[str, Category] = {}
    problems: list[AdmxError] = []

    for template in templates:
        categories, errors = parse_categories(template)
        problems.extend(errors)
        for cat in categories:
            previous = merged.get(cat.identifier)
            if previous is not None:
                logger.debug(f"Category '{cat.identifier}' from {previous.source} "
                             f"redefined by {cat.source}")
            merged[cat.identifier] = cat

    return merged, problems


class CategoryGraph:
    """Merged categories of a store with their parent links resolved."""

    def __init__(self, categories: dict[str, Category]):
        self._categories = dict(categories)
        self._links: dict[str, str] = {}

        for cat in self._categories.values():
            parent = cat.parent_identifier
            if parent and parent in self._categories:
                self._links[cat.identifier] = parent
            elif parent:
                logger.debug(f"Category '{cat.identifier}' references unknown parent '{parent}'")

        self._break_cycles()

        self._children: dict[str, list[str]] = {}
        for child_id, parent_id in self._links.items():
            self._children.setdefault(parent_id, []).append(child_id)
        for ids in self._children.values():
            ids.sort()

    def _break_cycles(self) -> None:
        # Only reachable when a cross-file overwrite rewires a parent
        for start in sorted(self._links):
            seen = {start}
            current = start
            while current in self._links:
                parent = self._links[current]
                if parent in seen:
                    logger.warning(f"Circular parent reference at '{current}' -> '{parent}', "
                                   f"removing parent link of '{current}'")
                    del self._links[current]
                    break
                seen.add(parent)
                current = parent

    def __len__(self) -> int:
        return len(self._categories)

    def __iter__(self) -> Iterator[Category]:
        return iter(self._categories.values())

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._categories

    def get(self, identifier: str | None) -> Category | None:
        if identifier is None:
            return None
        return self._categories.get(identifier)

    def parent_of(self, category: Category) -> Category | None:
        """Return the resolved parent of category, None for roots and dangling refs."""
        parent_id = self._links.get(category.identifier)
        return self._categories.get(parent_id) if parent_id else None

    def parent_id(self, category: Category) -> str | None:
        return self._links.get(category.identifier)

    def children(self, category: Category | str) -> list[Category]:
        identifier = category if isinstance(category, str) else category.identifier
        return [self._categories[c] for c in self._children.get(identifier, [])]

    def roots(self) -> list[Category]:
        """Categories without a resolved parent, sorted by display name."""
        roots = [c for c in self._categories.values() if c.identifier not in self._links]
        roots.sort(key=lambda c: (c.display_name, c.identifier))
        return roots

    def display_path(self, category: Category, separator: str = PATH_SEPARATOR) -> str:
        return display_path(self, category, separator)


def display_path(graph: CategoryGraph, category: Category,
                 separator: str = PATH_SEPARATOR) -> str:
    """
    Breadcrumb of category, root first:

        Windows Components\\Windows Update\\Manage end user experience
    """
    names = []
    current = category
    while current is not None:
        names.append(current.display_name)
        current = graph.parent_of(current)
    names.reverse()
    return separator.join(names)
