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
DirectoryMonitor - Monitor template store for ADMX/ADML changes and rescan
"""

from gi.repository import Gio
import logging

logger = logging.getLogger('admx_resolver')

WATCHED_SUFFIXES = ('.admx', '.adml')


class DirectoryMonitor:
    """Monitor the store directory and its locale folders, rescan on change"""

    def __init__(self, data_store, store_path, reload_callback=None):
        self.data_store = data_store
        self.store_path = store_path
        self.reload_callback = reload_callback
        self.monitors = []
        self.watched = set()

    def on_file_changed(self, monitor, file, other_file, event_type):
        """Callback when template files change in monitored directory"""
        if event_type not in (Gio.FileMonitorEvent.CHANGES_DONE_HINT,
                              Gio.FileMonitorEvent.CREATED,
                              Gio.FileMonitorEvent.DELETED,
                              Gio.FileMonitorEvent.MOVED_IN,
                              Gio.FileMonitorEvent.MOVED_OUT):
            return

        if (event_type in (Gio.FileMonitorEvent.CREATED, Gio.FileMonitorEvent.MOVED_IN)
                and file.query_file_type(Gio.FileQueryInfoFlags.NONE, None) == Gio.FileType.DIRECTORY):
            # locale folder added after startup
            if self._watch(file):
                logger.info(f"Watching new directory: {file.get_path()}")
                self.reload_data()
            return

        name = file.get_basename() or ''
        if not name.lower().endswith(WATCHED_SUFFIXES):
            return

        logger.info(f"Store change detected: {file.get_path()} ({event_type.value_name})")
        self.reload_data()

    def reload_data(self):
        """Rescan the monitored store"""
        logger.info(f"Reloading ADMX data from {self.store_path}")
        self.data_store.load_from_directory(self.store_path)

        if self.reload_callback:
            try:
                self.reload_callback()
            except Exception as e:
                logger.error(f"Error in reload callback: {e}")

    def _watch(self, gfile):
        path = gfile.get_path()
        if path in self.watched:
            return False
        monitor = gfile.monitor_directory(Gio.FileMonitorFlags.WATCH_MOVES, None)
        monitor.connect('changed', self.on_file_changed)
        self.monitors.append(monitor)
        self.watched.add(path)
        return True

    def start_monitoring(self):
        """Initial load, then watch the store and its locale folders"""
        self.reload_data()

        try:
            root = Gio.File.new_for_path(self.store_path)
            self._watch(root)
            enumerator = root.enumerate_children('standard::name,standard::type',
                                                 Gio.FileQueryInfoFlags.NONE, None)
            for info in enumerator:
                if info.get_file_type() == Gio.FileType.DIRECTORY:
                    self._watch(root.get_child(info.get_name()))
            logger.info(f"Started monitoring directory: {self.store_path}")
        except Exception as e:
            logger.error(f"Failed to setup directory monitor: {e}")

    def stop_monitoring(self):
        """Stop monitoring"""
        for monitor in self.monitors:
            monitor.cancel()
        if self.monitors:
            logger.info("Stopped directory monitoring")
        self.monitors = []
        self.watched = set()
