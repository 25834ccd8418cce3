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
ServiceDaemon - Main daemon class managing DBus service and GLib main loop
"""

import signal
import threading
import logging
from gi.repository import GLib
import dbus
import dbus.service
import dbus.mainloop.glib

from .config import Settings
from .datastore import PolicyDataStore
from .monitor import DirectoryMonitor
from .service import BUS_NAME, OBJECT_PATH, AdmxResolverService

logger = logging.getLogger('admx_resolver')


class ServiceDaemon:
    """Main daemon class managing DBus service and GLib main loop"""

    def __init__(self, daemon_mode=True, settings=None):
        self.daemon_mode = daemon_mode
        self.settings = settings or Settings()
        self.loop = None
        self.bus = None
        self.service = None
        self.data_store = None
        self.monitor = None
        self.shutdown_event = threading.Event()

    def setup_signal_handlers(self):
        """Setup signal handlers for graceful shutdown"""
        signal.signal(signal.SIGTERM, self.signal_handler)
        signal.signal(signal.SIGINT, self.signal_handler)

    def signal_handler(self, signum, frame):
        """Handle termination signals"""
        logger.info(f"Received signal {signum}, initiating shutdown...")
        self.shutdown_event.set()
        if self.loop:
            self.loop.quit()

    def setup_data_store(self):
        self.data_store = PolicyDataStore(locale=self.settings.get_locale(),
                                          workers=self.settings.get_workers())
        self.monitor = DirectoryMonitor(self.data_store, self.settings.get_store_path(),
                                        reload_callback=self.on_reload)

    def on_reload(self):
        store = self.data_store.store
        if store is not None:
            logger.info(f"Data reloaded: {len(store.categories)} categories, "
                        f"{len(store.policies)} policies, {len(store.problems)} problems")

    def setup_dbus(self):
        """Setup DBus connection and register service"""
        try:
            dbus.mainloop.glib.DBusGMainLoop(set_as_default=True)
            self.bus = dbus.SystemBus()
            bus_name = dbus.service.BusName(BUS_NAME, self.bus)
            self.service = AdmxResolverService(bus_name, OBJECT_PATH, self.data_store,
                                               reload_callback=self.monitor.reload_data)
            logger.info("DBus service registered successfully")
            return True
        except dbus.exceptions.DBusException as e:
            logger.error(f"Failed to setup DBus: {e}")
            return False

    def run(self):
        """Main daemon run method"""
        logger.info("Starting AdmxResolver daemon")

        self.setup_signal_handlers()
        self.setup_data_store()

        if not self.setup_dbus():
            logger.error("Failed to setup DBus, exiting")
            return 1

        # Loads the store, then watches it
        self.monitor.start_monitoring()

        self.loop = GLib.MainLoop()

        if self.daemon_mode:
            loop_thread = threading.Thread(target=self.loop.run)
            loop_thread.daemon = True
            loop_thread.start()

            logger.info("Daemon running in background mode")

            self.shutdown_event.wait()

            self.monitor.stop_monitoring()
            self.loop.quit()
            loop_thread.join(timeout=5)
        else:
            logger.info("Running in foreground mode")
            try:
                self.loop.run()
            except KeyboardInterrupt:
                logger.info("Keyboard interrupt received")
            finally:
                self.monitor.stop_monitoring()
                self.loop.quit()

        logger.info("AdmxResolver daemon stopped")
        return 0
