"""Builders for small ADMX/ADML documents."""

import pytest

from admx_resolver import MemoryTemplateSource

ADMX_NS = "http://schemas.microsoft.com/GroupPolicy/2006/07/PolicyDefinitions"


def build_admx(target="Vendor.App", prefix="app", using=(), categories="", policies=""):
    target_el = f'<target prefix="{prefix}" namespace="{target}"/>' if target else ""
    usings = "".join(f'<using prefix="{p}" namespace="{ns}"/>' for p, ns in using)
    return (
        '<?xml version="1.0" encoding="utf-8"?>'
        f'<policyDefinitions xmlns="{ADMX_NS}" revision="1.0" schemaVersion="1.0">'
        f"<policyNamespaces>{target_el}{usings}</policyNamespaces>"
        '<resources minRequiredRevision="1.0"/>'
        f"<categories>{categories}</categories>"
        f"<policies>{policies}</policies>"
        "</policyDefinitions>"
    )


def build_adml(strings=None, presentations=()):
    entries = "".join(f'<string id="{k}">{v}</string>' for k, v in (strings or {}).items())
    pres = "".join(f'<presentation id="{p}"/>' for p in presentations)
    return (
        '<?xml version="1.0" encoding="utf-8"?>'
        f'<policyDefinitionResources xmlns="{ADMX_NS}" revision="1.0" schemaVersion="1.0">'
        "<displayName/><description/>"
        f"<resources><stringTable>{entries}</stringTable>"
        f"<presentationTable>{pres}</presentationTable></resources>"
        "</policyDefinitionResources>"
    )


@pytest.fixture
def admx():
    return build_admx


@pytest.fixture
def adml():
    return build_adml


@pytest.fixture
def memory_store():
    """Build a MemoryTemplateSource from {path: (admx, adml)}."""

    def make(files, locale="en-US"):
        templates = {path: pair[0] for path, pair in files.items()}
        resources = {(path, locale): pair[1] for path, pair in files.items()
                     if pair[1] is not None}
        return MemoryTemplateSource(templates, resources)

    return make
