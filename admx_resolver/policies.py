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
PolicyDefinition extraction from the <policies> section of ADMX files
"""

import enum
import logging
from collections.abc import Iterable
from dataclasses import dataclass
import xml.etree.ElementTree as ET

from .categories import Category, CategoryGraph
from .elements import attr, children, first_child, sections, strip_ns
from .errors import AdmxError, MalformedTemplate
from .strings import expand_template
from .templates import ParsedTemplate

logger = logging.getLogger('admx_resolver')


class PolicyClass(str, enum.Enum):
    MACHINE = "Machine"
    USER = "User"
    BOTH = "Both"

    @classmethod
    def parse(cls, value: "str | PolicyClass | None") -> "PolicyClass | None":
        """Accept 'machine', 'User', PolicyClass.BOTH, '' or None."""
        if value is None or isinstance(value, PolicyClass):
            return value
        value = value.strip()
        if not value:
            return None
        for member in cls:
            if member.value.lower() == value.lower():
                return member
        raise ValueError(f"Unknown policy class: {value}")


def class_matches(policy_filter: PolicyClass | None, policy_class: PolicyClass) -> bool:
    """
    Machine and User filters also select Both policies; a Both filter
    selects Both policies only.
    """
    if policy_filter is None:
        return True
    return policy_class == policy_filter or policy_class == PolicyClass.BOTH


@dataclass(frozen=True)
class PolicyDefinition:
    source: str
    identifier: str
    policy_class: PolicyClass
    display_name: str
    category_ref: str | None
    category: Category | None
    key: str
    value_name: str | None


# children whose subtrees describe list items or enabled/disabled states
VALUE_LIST_TAGS = ("enabledList", "disabledList")


def find_value_name(pol: ET.Element) -> str | None:
    """
    Value name of a policy: its own valueName attribute, otherwise the
    valueName of the first direct child or <elements> entry that carries
    one. Items of enabledList/disabledList are never consulted, so
    list-only policies have no value name.
    """
    direct = attr(pol, "valueName") or attr(pol, "valuename")
    if direct:
        return direct

    for child in pol:
        local = strip_ns(child.tag)
        if local in VALUE_LIST_TAGS:
            continue
        if local == "elements":
            for el in child:
                value_name = attr(el, "valueName")
                if value_name:
                    return value_name
            continue
        value_name = attr(child, "valueName")
        if value_name:
            return value_name
    return None


def _parse_policy(template: ParsedTemplate, pol: ET.Element, name: str,
                  policy_class: PolicyClass, graph: CategoryGraph) -> PolicyDefinition:
    category_ref = None
    parent_el = first_child(pol, "parentCategory")
    if parent_el is not None:
        ref = attr(parent_el, "ref")
        if ref:
            category_ref = template.namespaces.qualify(ref, name)

    category = graph.get(category_ref)
    if category_ref and category is None:
        logger.debug(f"Policy '{name}' references unknown category '{category_ref}'")

    raw_display = pol.attrib.get("displayName")
    if raw_display is None:
        display_name = name
    else:
        display_name = expand_template(raw_display, template.strings, template.path, name)

    return PolicyDefinition(
        source=template.path,
        identifier=name,
        policy_class=policy_class,
        display_name=display_name,
        category_ref=category_ref,
        category=category,
        key=(pol.attrib.get("key") or "").strip().replace("/", "\\"),
        value_name=find_value_name(pol),
    )


def parse_policies(template: ParsedTemplate, graph: CategoryGraph,
                   policy_filter: PolicyClass | None = None) -> tuple[list[PolicyDefinition], list[AdmxError]]:
    """Extract the policies of one template that match policy_filter."""
    policies = []
    problems = []

    for block in sections(template.root, "policies"):
        for pol in children(block, "policy"):
            name = attr(pol, "name")
            if not name:
                continue

            try:
                policy_class = PolicyClass.parse(pol.attrib.get("class"))
                if policy_class is None:
                    raise ValueError("missing class attribute")
            except ValueError as e:
                problem = MalformedTemplate(template.path, str(e), name)
                logger.warning(f"Skipping policy: {problem}")
                problems.append(problem)
                continue

            if not class_matches(policy_filter, policy_class):
                continue

            try:
                policies.append(_parse_policy(template, pol, name, policy_class, graph))
            except AdmxError as e:
                logger.warning(f"Skipping policy: {e}")
                problems.append(e)

    return policies, problems


def extract_policies(templates: Iterable[ParsedTemplate], graph: CategoryGraph,
                     policy_class: PolicyClass | str | None = None) -> tuple[list[PolicyDefinition], list[AdmxError]]:
    """
    Extract policies of all templates, in template and document order.

    graph must already hold the categories of every template of the store,
    policies reference categories across files.
    """
    policy_filter = PolicyClass.parse(policy_class)
    policies: list[PolicyDefinition] = []
    problems: list[AdmxError] = []

    for template in templates:
        found, errors = parse_policies(template, graph, policy_filter)
        policies.extend(found)
        problems.extend(errors)

    logger.info(f"Extracted {len(policies)} policies"
                + (f" for class {policy_filter.value}" if policy_filter else ""))
    return policies, problems
