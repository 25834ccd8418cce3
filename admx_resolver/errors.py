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
Errors raised while scanning a template store.

Only StoreNotFound aborts a scan. Every other error is scoped to a single
file or element: it is caught at that boundary, logged and collected into
the scan result's problem list.
"""


class AdmxError(Exception):
    """Base class for all resolver errors."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class StoreNotFound(AdmxError):
    """The template store location does not exist."""

    def __init__(self, path: str):
        super().__init__(f"Policy definitions path does not exist: {path}", path)


class MalformedTemplate(AdmxError):
    """A definition file is not valid XML or lacks a target namespace."""

    def __init__(self, path: str, reason: str, element_id: str | None = None):
        where = f"{path} ({element_id})" if element_id else path
        super().__init__(f"Malformed template {where}: {reason}", path)
        self.reason = reason
        self.element_id = element_id


class UnknownNamespacePrefix(AdmxError):
    """A reference uses a prefix not declared in <policyNamespaces>."""

    def __init__(self, prefix: str, path: str, element_id: str | None = None):
        where = f" in '{element_id}'" if element_id else ""
        super().__init__(f"Unknown namespace prefix '{prefix}'{where}: {path}", path)
        self.prefix = prefix
        self.element_id = element_id


class ResourceLoadFailure(AdmxError):
    """The companion ADML file is missing or malformed."""

    def __init__(self, path: str, reason: str = "not found"):
        super().__init__(f"Cannot load resource file {path}: {reason}", path)
        self.reason = reason


class UnresolvedStringReference(AdmxError):
    """A display-name template names an id absent from the string table."""

    def __init__(self, string_id: str, path: str | None = None,
                 element_id: str | None = None):
        where = f" in '{element_id}'" if element_id else ""
        source = f": {path}" if path else ""
        super().__init__(f"Unresolved string reference '{string_id}'{where}{source}", path)
        self.string_id = string_id
        self.element_id = element_id

    def bind(self, path: str, element_id: str) -> "UnresolvedStringReference":
        """Return a copy attributed to the given file and element."""
        return UnresolvedStringReference(self.string_id, path, element_id)
