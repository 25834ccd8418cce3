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
AdmxResolverService - DBus interface to the resolved policy definitions
"""

import dbus
import dbus.service
import logging
import json

logger = logging.getLogger('admx_resolver')

BUS_NAME = 'org.altlinux.admxresolver'
OBJECT_PATH = '/org/altlinux/admxresolver'
INTERFACE = 'org.altlinux.AdmxResolver'


def to_variant(value):
    """Encode complex results as JSON strings"""
    if value is None:
        return ""
    if isinstance(value, (dict, list, tuple, set)):
        return json.dumps(value, default=str)
    if isinstance(value, (int, float, bool)):
        return value
    return str(value)


class AdmxResolverService(dbus.service.Object):
    """
    DBus service answering category and policy queries
    Lets clients find a policy by the name shown in the policy editor
    and read the registry key and value it controls
    """

    def __init__(self, bus_name, object_path, data_store, reload_callback=None):
        super().__init__(bus_name, object_path)
        self.data_store = data_store
        self.reload_callback = reload_callback
        logger.info(f"AdmxResolverService initialized at {object_path}")

    @dbus.service.method(INTERFACE, in_signature='s', out_signature='v')
    def get(self, path):
        """
        Get category or policy description
        Args:
            path: Category identifier or '<category id>/<policy name>'
        Returns:
            JSON object, empty string if not found
        """
        logger.info(f"get method called with path: {path}")
        return to_variant(self.data_store.get(path))

    @dbus.service.method(INTERFACE, in_signature='s', out_signature='v')
    def list_children(self, parent_path):
        """
        List subcategories and policies under a category
        Args:
            parent_path: Category identifier, empty string for root categories
        Returns:
            JSON array of child paths
        """
        logger.info(f"list_children method called with parent_path: {parent_path}")
        return to_variant(self.data_store.list_children(parent_path))

    @dbus.service.method(INTERFACE, in_signature='ss', out_signature='v')
    def find(self, search_pattern, search_type):
        """
        Find records by display name
        Args:
            search_pattern: Text contained in the display name
            search_type: 'policy' or 'category'
        Returns:
            JSON array of matching records
        """
        logger.info(f"find method called with pattern: {search_pattern}, type: {search_type}")
        return to_variant(self.data_store.find(search_pattern, search_type or 'policy'))

    @dbus.service.method(INTERFACE, in_signature='s', out_signature='s')
    def display_path(self, category_id):
        """Breadcrumb of a category as shown in the policy editor"""
        logger.info(f"display_path method called with category_id: {category_id}")
        return self.data_store.display_path(category_id)

    @dbus.service.method(INTERFACE, out_signature='b')
    def reload(self):
        """
        Manually trigger rescan of the template store
        Returns:
            True if the callback ran without error
        """
        logger.info("Manual reload requested")
        if self.reload_callback is None:
            return False
        try:
            self.reload_callback()
        except Exception as e:
            logger.error(f"Reload failed: {e}")
            return False
        return True
