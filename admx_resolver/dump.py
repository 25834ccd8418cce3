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

import sys
from pathlib import Path

from .errors import StoreNotFound
from .policies import PolicyClass
from .source import DirectoryTemplateSource
from .store import PolicyStore


def usage(prog: str) -> None:
    print("Error: Insufficient arguments", file=sys.stderr)
    print(f"Usage: {prog} <policy_definitions_path> [language] [Machine|User|Both]", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv if argv is None else argv
    #   <policy_definitions_path> [language] [class]
    if len(argv) < 2:
        usage(Path(argv[0]).name)
        return 1

    policy_definitions_path = argv[1]
    requested_locale = argv[2] if len(argv) > 2 else "en-US"

    try:
        policy_class = PolicyClass.parse(argv[3] if len(argv) > 3 else None)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        store = PolicyStore.scan(DirectoryTemplateSource(policy_definitions_path),
                                 locale=requested_locale, policy_class=policy_class)
    except StoreNotFound as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # JSON -> stdout
    print(store.dumps(ensure_ascii=False, indent=2))

    print("\nParsing completed:", file=sys.stderr)
    print(f"  - Total policies: {len(store.policies)}", file=sys.stderr)
    print(f"  - Total categories: {len(store.categories)}", file=sys.stderr)
    for problem in store.problems:
        print(f"[WARN] {problem}", file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
