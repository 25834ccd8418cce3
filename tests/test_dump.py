import json

from admx_resolver.dump import main

CATS = '<category name="Root" displayName="$(string.root)"/>'
POLICIES = ('<policy name="UserPol" class="User" displayName="User" key="Software\\A" valueName="U">'
            '<parentCategory ref="Root"/></policy>'
            '<policy name="MachinePol" class="Machine" displayName="Machine" key="Software\\A" valueName="M">'
            '<parentCategory ref="Root"/></policy>')


def make_store(tmp_path, admx, adml):
    root = tmp_path / "PolicyDefinitions"
    (root / "en-US").mkdir(parents=True)
    (root / "Vendor.admx").write_text(admx(categories=CATS, policies=POLICIES), encoding="utf-8")
    (root / "en-US" / "Vendor.adml").write_text(adml({"root": "Vendor"}), encoding="utf-8")
    return root


def test_dump_prints_json(tmp_path, admx, adml, capsys):
    root = make_store(tmp_path, admx, adml)

    assert main(["admx-dump", str(root)]) == 0

    captured = capsys.readouterr()
    data = json.loads(captured.out)
    assert data["meta"]["Total policies"] == 2
    assert "Total categories: 1" in captured.err


def test_dump_filters_by_class(tmp_path, admx, adml, capsys):
    root = make_store(tmp_path, admx, adml)

    assert main(["admx-dump", str(root), "en-US", "User"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert [p["name"] for p in data["policies"]] == ["UserPol"]
    assert data["meta"]["class"] == "User"


def test_dump_without_arguments_prints_usage(capsys):
    assert main(["admx-dump"]) == 1
    assert "Usage: admx-dump" in capsys.readouterr().err


def test_dump_missing_store(tmp_path, capsys):
    assert main(["admx-dump", str(tmp_path / "absent")]) == 1
    assert "does not exist" in capsys.readouterr().err


def test_dump_bad_class(tmp_path, admx, adml, capsys):
    root = make_store(tmp_path, admx, adml)
    assert main(["admx-dump", str(root), "en-US", "Everyone"]) == 1
