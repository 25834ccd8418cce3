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
Template sources - providers of raw ADMX and ADML content for one store
"""

import logging
from collections.abc import Iterator, Mapping
from pathlib import Path, PurePath
from typing import Protocol

from .errors import MalformedTemplate, ResourceLoadFailure, StoreNotFound

logger = logging.getLogger('admx_resolver')

DEFAULT_LOCALE = "en-US"


class TemplateSource(Protocol):
    """Provider of the definition files of a template store."""

    def templates(self) -> Iterator[str]:
        """
        Yield the path of every ADMX file, ordered by path.

        Raises:
            StoreNotFound: the store does not exist
        """
        ...

    def read(self, path: str) -> bytes:
        """
        Return the content of one ADMX file.

        Raises:
            MalformedTemplate: the file cannot be read
        """
        ...

    def resource(self, path: str, locale: str) -> tuple[str, bytes]:
        """
        Return (resource_path, content) of the ADML companion of path.

        Raises:
            ResourceLoadFailure: no companion exists for path
        """
        ...


class DirectoryTemplateSource:
    """
    PolicyDefinitions directory layout:

        <root>/*.admx
        <root>/<locale>/<name>.adml
    """

    def __init__(self, root: str | Path, fallback_locale: str | None = DEFAULT_LOCALE):
        self.root = Path(root)
        self.fallback_locale = fallback_locale

    def templates(self) -> Iterator[str]:
        if not self.root.is_dir():
            raise StoreNotFound(str(self.root))

        files = sorted(p for p in self.root.iterdir()
                       if p.is_file() and p.suffix.lower() == ".admx")
        logger.info(f"Found {len(files)} ADMX files in {self.root}")
        for admx_file in files:
            yield str(admx_file)

    def read(self, path: str) -> bytes:
        try:
            return Path(path).read_bytes()
        except OSError as e:
            raise MalformedTemplate(path, f"cannot read: {e}") from e

    def _find_adml(self, locale_dir: Path, name: str) -> Path | None:
        candidate = locale_dir / name
        if candidate.is_file():
            return candidate
        if not locale_dir.is_dir():
            return None
        # Stores copied from Windows shares do not preserve name case
        lowered = name.lower()
        for p in sorted(locale_dir.iterdir()):
            if p.name.lower() == lowered and p.is_file():
                return p
        return None

    def resource(self, path: str, locale: str) -> tuple[str, bytes]:
        admx = Path(path)
        name = admx.stem + ".adml"
        expected = admx.parent / locale / name

        locales = [locale]
        if self.fallback_locale and self.fallback_locale != locale:
            locales.append(self.fallback_locale)

        for loc in locales:
            found = self._find_adml(admx.parent / loc, name)
            if found is None:
                continue
            if loc != locale:
                logger.debug(f"No {locale} resources for {admx.name}, using {loc}")
            try:
                return str(found), found.read_bytes()
            except OSError as e:
                raise ResourceLoadFailure(str(found), str(e)) from e

        raise ResourceLoadFailure(str(expected))


class MemoryTemplateSource:
    """
    Template store held in memory.

    templates maps ADMX path to content; resources maps
    (ADMX path, locale) to ADML content.
    """

    def __init__(self, templates: Mapping[str, bytes | str],
                 resources: Mapping[tuple[str, str], bytes | str] | None = None,
                 fallback_locale: str | None = DEFAULT_LOCALE):
        self._templates = {k: _as_bytes(v) for k, v in templates.items()}
        self._resources = {k: _as_bytes(v) for k, v in (resources or {}).items()}
        self.fallback_locale = fallback_locale

    def templates(self) -> Iterator[str]:
        yield from sorted(self._templates)

    def read(self, path: str) -> bytes:
        return self._templates[path]

    def resource(self, path: str, locale: str) -> tuple[str, bytes]:
        locales = [locale]
        if self.fallback_locale and self.fallback_locale != locale:
            locales.append(self.fallback_locale)
        for loc in locales:
            content = self._resources.get((path, loc))
            if content is not None:
                return _resource_path(path, loc), content
        raise ResourceLoadFailure(_resource_path(path, locale))


def _resource_path(path: str, locale: str) -> str:
    admx = PurePath(path)
    return str(admx.parent / locale / (admx.stem + ".adml"))


def _as_bytes(content: bytes | str) -> bytes:
    return content.encode("utf-8") if isinstance(content, str) else content
