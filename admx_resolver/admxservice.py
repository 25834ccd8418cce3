#!/usr/bin/env python3
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
AdmxResolver service entry point
Serves policy definitions of a PolicyDefinitions store over DBus
"""

import sys
import logging
import logging.handlers

logger = logging.getLogger('admx_resolver')


def setup_logging(level=logging.DEBUG):
    """Log to syslog/journald, fall back to stdout"""
    logger.setLevel(level)
    try:
        handler = logging.handlers.SysLogHandler(address='/dev/log')
        formatter = logging.Formatter('admx-resolver[%(process)d]: %(levelname)s: %(message)s')
    except OSError:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def main():
    """Main entry point"""
    setup_logging()

    from .daemon import ServiceDaemon

    daemon_mode = '--foreground' not in sys.argv
    daemon = ServiceDaemon(daemon_mode=daemon_mode)

    return daemon.run()


if __name__ == '__main__':
    sys.exit(main())
