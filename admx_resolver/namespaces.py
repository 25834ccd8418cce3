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
NamespaceContext - prefix table of a single ADMX file

    <policyNamespaces>
      <target prefix="app" namespace="Vendor.App"/>
      <using prefix="windows" namespace="Microsoft.Policies.Windows"/>
    </policyNamespaces>
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from collections.abc import Mapping
import xml.etree.ElementTree as ET

from .elements import attr, children, sections
from .errors import MalformedTemplate, UnknownNamespacePrefix


@dataclass(frozen=True)
class NamespaceContext:
    path: str
    target: str
    prefixes: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "prefixes", MappingProxyType(dict(self.prefixes)))

    def qualify(self, reference: str, element_id: str | None = None) -> str:
        """
        Turn a raw reference into a globally unique identifier.

          System          -> <target>.System
          windows:System  -> Microsoft.Policies.Windows.System

        Raises:
            UnknownNamespacePrefix: the prefix is not declared in this file
        """
        reference = reference.strip()
        if ":" not in reference:
            return f"{self.target}.{reference}"

        prefix, name = reference.split(":", 1)
        prefix = prefix.strip()
        namespace = self.prefixes.get(prefix)
        if namespace is None:
            raise UnknownNamespacePrefix(prefix, self.path, element_id)
        return f"{namespace}.{name.strip()}"


def parse_namespaces(root: ET.Element, path: str) -> NamespaceContext:
    """
    Build the NamespaceContext of a parsed ADMX document.

    The target prefix and the empty prefix both map to the target namespace;
    for repeated <using> prefixes the last declaration wins.

    Raises:
        MalformedTemplate: the file declares no target namespace
    """
    target = None
    target_prefix = None
    prefixes: dict[str, str] = {}

    for block in sections(root, "policyNamespaces"):
        for el in children(block, "target"):
            target = attr(el, "namespace")
            target_prefix = attr(el, "prefix")
        for el in children(block, "using"):
            prefix = attr(el, "prefix")
            namespace = attr(el, "namespace")
            if prefix is not None and namespace:
                prefixes[prefix] = namespace

    if not target:
        raise MalformedTemplate(path, "no target namespace declared")

    prefixes[""] = target
    if target_prefix:
        prefixes[target_prefix] = target

    return NamespaceContext(path=path, target=target, prefixes=prefixes)
