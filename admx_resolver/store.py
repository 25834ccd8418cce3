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
PolicyStore - resolved view of one template store
"""

import json
import logging

from .categories import PATH_SEPARATOR, Category, CategoryGraph, collect_categories
from .errors import AdmxError
from .policies import PolicyClass, PolicyDefinition, extract_policies
from .source import DEFAULT_LOCALE, TemplateSource
from .templates import load_templates

logger = logging.getLogger('admx_resolver')


class PolicyStore:
    """
    Categories, policies and problems produced by a single scan.

    The store is never updated; scanning again yields a new store.
    """

    def __init__(self, categories: CategoryGraph, policies: list[PolicyDefinition],
                 problems: list[AdmxError], locale: str = DEFAULT_LOCALE,
                 policy_class: PolicyClass | None = None,
                 separator: str = PATH_SEPARATOR):
        self.categories = categories
        self.policies = policies
        self.problems = problems
        self.locale = locale
        self.policy_class = policy_class
        self.separator = separator

    @classmethod
    def scan(cls, source: TemplateSource, locale: str = DEFAULT_LOCALE,
             policy_class: PolicyClass | str | None = None, workers: int = 1,
             separator: str = PATH_SEPARATOR) -> "PolicyStore":
        """
        Parse and resolve every template of a store.

        All templates are parsed and their categories merged before parent
        links or policy categories are resolved.

        Args:
            source: provider of the ADMX/ADML contents
            locale: ADML locale folder, e.g. 'ru-RU'
            policy_class: keep only policies applying to this class
            workers: number of threads parsing files
            separator: display path separator

        Raises:
            StoreNotFound: the store does not exist
        """
        policy_filter = PolicyClass.parse(policy_class)

        templates, problems = load_templates(source, locale, workers)

        merged, category_problems = collect_categories(templates)
        problems.extend(category_problems)
        graph = CategoryGraph(merged)

        policies, policy_problems = extract_policies(templates, graph, policy_filter)
        problems.extend(policy_problems)

        if problems:
            logger.warning(f"Scan finished with {len(problems)} problems")
        logger.info(f"Resolved {len(graph)} categories and {len(policies)} policies")

        return cls(graph, policies, problems, locale=locale,
                   policy_class=policy_filter, separator=separator)

    def category(self, identifier: str) -> Category | None:
        return self.categories.get(identifier)

    def display_path(self, category: Category | str) -> str:
        """
        Breadcrumb of a category given as record or qualified identifier.

        Raises:
            KeyError: identifier is not a category of this store
        """
        if isinstance(category, str):
            record = self.categories.get(category)
            if record is None:
                raise KeyError(category)
            category = record
        return self.categories.display_path(category, self.separator)

    def policy_path(self, policy: PolicyDefinition) -> str:
        """Breadcrumb of a policy: its category path followed by its own name."""
        if policy.category is None:
            return policy.display_name
        return self.display_path(policy.category) + self.separator + policy.display_name

    def find_policies(self, text: str) -> list[PolicyDefinition]:
        """Policies whose display name contains text, case-insensitive."""
        needle = text.casefold()
        return [p for p in self.policies if needle in p.display_name.casefold()]

    def find_categories(self, text: str) -> list[Category]:
        needle = text.casefold()
        return [c for c in self.categories if needle in c.display_name.casefold()]

    def policies_in(self, category: Category | str) -> list[PolicyDefinition]:
        identifier = category if isinstance(category, str) else category.identifier
        return [p for p in self.policies if p.category is not None
                and p.category.identifier == identifier]

    # --- JSON helpers ---

    def category_to_dict(self, cat: Category) -> dict:
        return {
            "id": cat.identifier,
            "displayName": cat.display_name,
            "parent": self.categories.parent_id(cat),
            "parentRef": cat.parent_identifier,
            "path": self.display_path(cat),
        }

    def policy_to_dict(self, policy: PolicyDefinition) -> dict:
        return {
            "source": policy.source,
            "name": policy.identifier,
            "class": policy.policy_class.value,
            "displayName": policy.display_name,
            "category": policy.category.identifier if policy.category else None,
            "categoryRef": policy.category_ref,
            "path": self.policy_path(policy),
            "key": policy.key,
            "valueName": policy.value_name,
        }

    def to_dict(self) -> dict:
        return {
            "meta": {
                "locale": self.locale,
                "class": self.policy_class.value if self.policy_class else None,
                "Total categories": len(self.categories),
                "Total policies": len(self.policies),
                "Problems": len(self.problems),
            },
            "categories": [self.category_to_dict(c)
                           for c in sorted(self.categories, key=lambda c: c.identifier)],
            "policies": [self.policy_to_dict(p) for p in self.policies],
            "problems": [{"type": type(e).__name__, "path": e.path, "message": str(e)}
                         for e in self.problems],
        }

    def dumps(self, *, ensure_ascii: bool = False, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=ensure_ascii, indent=indent)
