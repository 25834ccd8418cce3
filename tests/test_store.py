import json
import pathlib

import pytest

from admx_resolver import (
    DirectoryTemplateSource,
    MalformedTemplate,
    PolicyStore,
    ResourceLoadFailure,
    StoreNotFound,
)

CATS = ('<category name="Root" displayName="$(string.root)"/>'
        '<category name="Sub" displayName="$(string.sub)"><parentCategory ref="Root"/></category>')
POLICIES = ('<policy name="Pol" class="Both" displayName="$(string.pol)" '
            'key="Software\\Policies\\Vendor" valueName="Value">'
            '<parentCategory ref="Sub"/></policy>')
STRINGS = {"root": "Vendor", "sub": "Settings", "pol": "Turn on feature"}


def write_store(root, files):
    """files maps ADMX name to (admx text, {locale: adml text})."""
    root.mkdir(parents=True, exist_ok=True)
    for name, (admx_text, resources) in files.items():
        (root / name).write_text(admx_text, encoding="utf-8")
        for locale, adml_text in resources.items():
            locale_dir = root / locale
            locale_dir.mkdir(exist_ok=True)
            (locale_dir / (name.rsplit(".", 1)[0] + ".adml")).write_text(adml_text, encoding="utf-8")
    return root


@pytest.fixture
def store_dir(tmp_path, admx, adml):
    return write_store(tmp_path / "PolicyDefinitions", {
        "Vendor.admx": (admx(categories=CATS, policies=POLICIES),
                        {"en-US": adml(STRINGS), "ru-RU": adml({"root": "Поставщик",
                                                                "sub": "Настройки",
                                                                "pol": "Включить"})}),
    })


def test_scan_directory(store_dir):
    store = PolicyStore.scan(DirectoryTemplateSource(store_dir))

    [policy] = store.policies
    assert policy.source == str(store_dir / "Vendor.admx")
    assert store.policy_path(policy) == "Vendor\\Settings\\Turn on feature"
    assert store.problems == []


def test_scan_uses_requested_locale(store_dir):
    store = PolicyStore.scan(DirectoryTemplateSource(store_dir), locale="ru-RU")
    assert store.display_path("Vendor.App.Sub") == "Поставщик\\Настройки"


def test_missing_locale_falls_back_to_en_us(store_dir):
    store = PolicyStore.scan(DirectoryTemplateSource(store_dir), locale="de-DE")
    assert store.display_path("Vendor.App.Sub") == "Vendor\\Settings"


def test_missing_locale_without_fallback_is_reported(store_dir):
    source = DirectoryTemplateSource(store_dir, fallback_locale=None)
    store = PolicyStore.scan(source, locale="de-DE")

    assert len(store.categories) == 0
    [problem] = store.problems
    assert isinstance(problem, ResourceLoadFailure)
    assert problem.path == str(store_dir / "de-DE" / "Vendor.adml")


def test_adml_name_case_is_ignored(tmp_path, admx, adml):
    root = tmp_path / "store"
    (root / "en-US").mkdir(parents=True)
    (root / "Vendor.admx").write_text(admx(categories=CATS), encoding="utf-8")
    (root / "en-US" / "vendor.ADML").write_text(adml(STRINGS), encoding="utf-8")

    store = PolicyStore.scan(DirectoryTemplateSource(root))
    assert store.display_path("Vendor.App.Sub") == "Vendor\\Settings"


def test_missing_store_is_fatal(tmp_path):
    with pytest.raises(StoreNotFound):
        PolicyStore.scan(DirectoryTemplateSource(tmp_path / "absent"))


def test_scanning_twice_gives_identical_records(store_dir):
    first = PolicyStore.scan(DirectoryTemplateSource(store_dir))
    second = PolicyStore.scan(DirectoryTemplateSource(store_dir))

    assert list(first.categories) == list(second.categories)
    assert first.policies == second.policies


def test_bad_template_does_not_change_other_results(admx, adml, memory_store):
    good = {"Vendor.admx": (admx(categories=CATS, policies=POLICIES), adml(STRINGS))}
    bad = dict(good, **{"Broken.admx": ("<policyDefinitions><categories>", None)})

    clean = PolicyStore.scan(memory_store(good))
    dirty = PolicyStore.scan(memory_store(bad))

    assert list(dirty.categories) == list(clean.categories)
    assert dirty.policies == clean.policies
    assert len(dirty.policies) == 1
    [problem] = dirty.problems
    assert isinstance(problem, MalformedTemplate)
    assert problem.path == "Broken.admx"


def test_unreadable_template_skips_only_that_file(tmp_path, admx, adml, monkeypatch):
    root = write_store(tmp_path / "PolicyDefinitions", {
        "A.admx": (admx(categories=CATS, policies=POLICIES), {"en-US": adml(STRINGS)}),
        "B.admx": (admx(target="Other.Ns", categories=CATS), {"en-US": adml(STRINGS)}),
    })
    read_bytes = pathlib.Path.read_bytes

    def deny_b(self):
        if self.name == "B.admx":
            raise PermissionError(13, "Permission denied", str(self))
        return read_bytes(self)

    monkeypatch.setattr(pathlib.Path, "read_bytes", deny_b)
    store = PolicyStore.scan(DirectoryTemplateSource(root))

    assert {c.identifier for c in store.categories} == {"Vendor.App.Root", "Vendor.App.Sub"}
    assert [p.identifier for p in store.policies] == ["Pol"]
    [problem] = store.problems
    assert isinstance(problem, MalformedTemplate)
    assert problem.path == str(root / "B.admx")


def test_missing_resource_skips_only_that_file(admx, adml, memory_store):
    source = memory_store({
        "Vendor.admx": (admx(categories=CATS, policies=POLICIES), adml(STRINGS)),
        "Other.admx": (admx(target="Other.Ns", categories=CATS), None),
    })
    store = PolicyStore.scan(source)

    assert {c.identifier for c in store.categories} == {"Vendor.App.Root", "Vendor.App.Sub"}
    [problem] = store.problems
    assert isinstance(problem, ResourceLoadFailure)


def test_parallel_scan_matches_serial_scan(admx, adml, memory_store):
    files = {}
    for i in range(6):
        ns = f"Vendor.Part{i}"
        files[f"Part{i}.admx"] = (admx(target=ns, categories=CATS, policies=POLICIES), adml(STRINGS))
    # Same identifier in two files: the later path wins in both modes
    files["Z.admx"] = (admx(target="Vendor.Part0", categories=CATS),
                       adml(dict(STRINGS, root="Last")))
    source = memory_store(files)

    serial = PolicyStore.scan(source, workers=1)
    parallel = PolicyStore.scan(source, workers=4)

    assert list(parallel.categories) == list(serial.categories)
    assert parallel.policies == serial.policies
    assert parallel.category("Vendor.Part0.Root").display_name == "Last"


def test_unicode_encoding_declaration_is_accepted(tmp_path, admx, adml):
    root = tmp_path / "store"
    (root / "en-US").mkdir(parents=True)
    text = admx(categories=CATS).replace('encoding="utf-8"', 'encoding="unicode"')
    (root / "Vendor.admx").write_bytes(text.encode("utf-16"))
    (root / "en-US" / "Vendor.adml").write_text(adml(STRINGS), encoding="utf-8")

    store = PolicyStore.scan(DirectoryTemplateSource(root))
    assert store.problems == []
    assert store.display_path("Vendor.App.Sub") == "Vendor\\Settings"


def test_to_dict_is_json_serializable(store_dir):
    store = PolicyStore.scan(DirectoryTemplateSource(store_dir))
    data = json.loads(store.dumps())

    assert data["meta"]["Total categories"] == 2
    assert data["meta"]["Total policies"] == 1
    [policy] = data["policies"]
    assert policy["category"] == "Vendor.App.Sub"
    assert policy["valueName"] == "Value"
    sub = next(c for c in data["categories"] if c["id"] == "Vendor.App.Sub")
    assert sub["parent"] == "Vendor.App.Root"
    assert sub["path"] == "Vendor\\Settings"
