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
Settings - service configuration stored in dconf
"""

from gi.repository import Gio
import logging

logger = logging.getLogger('admx_resolver')

SCHEMA_ID = 'org.altlinux.admxresolver'

DEFAULT_STORE_PATH = '/usr/share/PolicyDefinitions'
DEFAULT_LOCALE = 'en-US'
DEFAULT_WORKERS = 1


class Settings:
    """GSettings-backed configuration with built-in defaults"""

    def __init__(self, settings=None):
        self.settings = settings
        if self.settings is None:
            # The schema is absent when the service runs from a source tree
            source = Gio.SettingsSchemaSource.get_default()
            if source is not None and source.lookup(SCHEMA_ID, True) is not None:
                self.settings = Gio.Settings.new(SCHEMA_ID)
            else:
                logger.debug(f"GSettings schema {SCHEMA_ID} is not installed")

    def _get_string(self, key, default):
        if self.settings:
            try:
                value = self.settings.get_string(key)
                if value:
                    logger.info(f"Using {key} from dconf: {value}")
                    return value
            except Exception as e:
                logger.debug(f"Could not read {key} from dconf: {e}")
        return default

    def get_store_path(self):
        """Get template store path from dconf or use default"""
        return self._get_string('store-path', DEFAULT_STORE_PATH)

    def get_locale(self):
        """Get ADML locale from dconf or use default"""
        return self._get_string('locale', DEFAULT_LOCALE)

    def get_workers(self):
        """Get number of parsing threads from dconf or use default"""
        if self.settings:
            try:
                value = self.settings.get_int('scan-workers')
                if value > 0:
                    return value
            except Exception as e:
                logger.debug(f"Could not read scan-workers from dconf: {e}")
        return DEFAULT_WORKERS
