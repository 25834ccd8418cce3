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
ParsedTemplate - file-scoped parse result of one ADMX file
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
import xml.etree.ElementTree as ET

from .elements import parse_xml
from .errors import AdmxError, MalformedTemplate
from .namespaces import NamespaceContext, parse_namespaces
from .source import TemplateSource
from .strings import StringTable, load_string_table

logger = logging.getLogger('admx_resolver')


@dataclass(frozen=True)
class ParsedTemplate:
    path: str
    root: ET.Element
    namespaces: NamespaceContext
    strings: StringTable


def parse_template(path: str, source: TemplateSource, locale: str) -> ParsedTemplate:
    """
    Read and parse one ADMX file together with its ADML companion.

    Raises:
        MalformedTemplate: unreadable file, invalid XML or no target namespace
        ResourceLoadFailure: the companion is missing or invalid
    """
    content = source.read(path)
    try:
        root = parse_xml(content)
    except ET.ParseError as e:
        raise MalformedTemplate(path, f"parse error: {e}") from e

    namespaces = parse_namespaces(root, path)
    resource_path, resource = source.resource(path, locale)
    strings = load_string_table(resource, resource_path)

    return ParsedTemplate(path=path, root=root, namespaces=namespaces, strings=strings)


def load_templates(source: TemplateSource, locale: str,
                   workers: int = 1) -> tuple[list[ParsedTemplate], list[AdmxError]]:
    """
    Parse every template of a store.

    Files are parsed independently, on a thread pool when workers > 1.
    Results keep the source order so merges downstream are reproducible.
    A file that fails is reported in the returned problem list and left
    out of the result.

    Raises:
        StoreNotFound: the store does not exist
    """
    paths = list(source.templates())

    def parse_one(path):
        try:
            return parse_template(path, source, locale)
        except AdmxError as e:
            return e

    if workers > 1 and len(paths) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(parse_one, paths))
    else:
        results = [parse_one(path) for path in paths]

    templates = []
    problems = []
    for result in results:
        if isinstance(result, AdmxError):
            logger.warning(f"Skipping template: {result}")
            problems.append(result)
        else:
            templates.append(result)

    logger.info(f"Parsed {len(templates)} of {len(paths)} templates ({locale})")
    return templates, problems
