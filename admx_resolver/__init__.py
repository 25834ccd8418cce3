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
Resolver of Group Policy administrative templates (ADMX/ADML).

    store = PolicyStore.scan(DirectoryTemplateSource('/usr/share/PolicyDefinitions'),
                             locale='ru-RU', policy_class='Machine')
    for policy in store.find_policies('Windows Update'):
        print(store.policy_path(policy), policy.key, policy.value_name)
"""

from .categories import Category, CategoryGraph, collect_categories, display_path
from .errors import (
    AdmxError,
    MalformedTemplate,
    ResourceLoadFailure,
    StoreNotFound,
    UnknownNamespacePrefix,
    UnresolvedStringReference,
)
from .namespaces import NamespaceContext, parse_namespaces
from .policies import PolicyClass, PolicyDefinition, extract_policies
from .source import DirectoryTemplateSource, MemoryTemplateSource, TemplateSource
from .store import PolicyStore
from .strings import StringTable, expand_template, load_string_table
from .templates import ParsedTemplate, load_templates, parse_template

__all__ = [
    "AdmxError",
    "Category",
    "CategoryGraph",
    "DirectoryTemplateSource",
    "MalformedTemplate",
    "MemoryTemplateSource",
    "NamespaceContext",
    "ParsedTemplate",
    "PolicyClass",
    "PolicyDefinition",
    "PolicyStore",
    "ResourceLoadFailure",
    "StoreNotFound",
    "StringTable",
    "TemplateSource",
    "UnknownNamespacePrefix",
    "UnresolvedStringReference",
    "collect_categories",
    "display_path",
    "expand_template",
    "extract_policies",
    "load_string_table",
    "load_templates",
    "parse_namespaces",
    "parse_template",
]
