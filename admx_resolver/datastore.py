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
PolicyDataStore - holder of the current PolicyStore of a service
"""

import threading
import logging

from .errors import StoreNotFound
from .source import DEFAULT_LOCALE, DirectoryTemplateSource
from .store import PolicyStore

logger = logging.getLogger('admx_resolver')


class PolicyDataStore:
    """Thread-safe holder of the PolicyStore loaded from a directory"""

    def __init__(self, locale=DEFAULT_LOCALE, workers=1):
        self.locale = locale
        self.workers = workers
        self.store = None
        self.lock = threading.RLock()

    def load_from_directory(self, directory_path='/usr/share/PolicyDefinitions'):
        """
        Rescan a PolicyDefinitions directory and replace the current store

        Returns:
            The new PolicyStore, or None if the directory does not exist
        """
        logger.info(f"Loading ADMX data from {directory_path}")
        try:
            store = PolicyStore.scan(DirectoryTemplateSource(directory_path),
                                     locale=self.locale, workers=self.workers)
        except StoreNotFound as e:
            logger.warning(str(e))
            return None

        with self.lock:
            self.store = store
        return store

    def get(self, path):
        """
        Get category or policy by path

        Args:
            path: qualified category identifier, or '<category id>/<policy name>'
        Returns:
            dict describing the record, None if not found
        """
        with self.lock:
            if self.store is None:
                return None
            category = self.store.category(path)
            if category is not None:
                return self.store.category_to_dict(category)

            category_id, _, name = path.rpartition('/')
            for policy in self.store.policies_in(category_id):
                if policy.identifier == name:
                    return self.store.policy_to_dict(policy)
            return None

    def list_children(self, parent_path):
        """List subcategory ids and policy names under a category, roots for ''"""
        with self.lock:
            if self.store is None:
                return []
            if not parent_path:
                return [c.identifier for c in self.store.categories.roots()]

            children = [c.identifier for c in self.store.categories.children(parent_path)]
            children.extend(f"{parent_path}/{p.identifier}"
                            for p in self.store.policies_in(parent_path))
            return children

    def find(self, search_pattern, search_type='policy'):
        """
        Find records by display name

        Args:
            search_pattern: text contained in the display name
            search_type: 'policy' or 'category'
        """
        with self.lock:
            if self.store is None:
                return []
            if search_type == 'category':
                return [self.store.category_to_dict(c)
                        for c in self.store.find_categories(search_pattern)]
            return [self.store.policy_to_dict(p)
                    for p in self.store.find_policies(search_pattern)]

    def display_path(self, category_id):
        with self.lock:
            if self.store is None:
                return ''
            try:
                return self.store.display_path(category_id)
            except KeyError:
                return ''
