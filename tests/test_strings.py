import pytest

from admx_resolver import (
    ResourceLoadFailure,
    StringTable,
    UnresolvedStringReference,
    expand_template,
    load_string_table,
)


@pytest.fixture
def table(adml):
    content = adml({"title": "Top", "nested": "$(string.title)"}, presentations=["Pres1"])
    return load_string_table(content.encode("utf-8"), "en-US/Vendor.adml")


def test_table_holds_strings_and_presentations(table):
    assert table[("string", "title")] == "Top"
    assert table[("presentation", "Pres1")] == ""
    assert len(table) == 3


def test_expand_substitutes_every_token(table):
    assert expand_template("$(string.title) - $(presentation.Pres1)end", table) == "Top - end"


def test_expand_ignores_whitespace_and_kind_case(table):
    assert expand_template("$( string.title )", table) == "Top"
    assert expand_template("$(String.title)", table) == "Top"


def test_plain_text_passes_through(table):
    assert expand_template("Costs $5 (approx.)", table) == "Costs $5 (approx.)"
    assert expand_template("", table) == ""


def test_unterminated_token_is_unresolved(table):
    with pytest.raises(UnresolvedStringReference) as info:
        expand_template("$(string.title) and $(string.tit", table, "Vendor.admx", "Cat1")
    assert info.value.string_id == "string.tit"
    assert info.value.path == "Vendor.admx"
    assert info.value.element_id == "Cat1"


def test_bare_open_token_is_unresolved(table):
    with pytest.raises(UnresolvedStringReference):
        expand_template("Costs $(", table)


def test_values_are_not_expanded_again(table):
    assert expand_template("$(string.nested)", table) == "$(string.title)"


def test_unknown_string_reports_file_element_and_id(table):
    with pytest.raises(UnresolvedStringReference) as info:
        expand_template("$(string.missing)", table, "Vendor.admx", "Cat1")
    assert info.value.string_id == "missing"
    assert info.value.path == "Vendor.admx"
    assert info.value.element_id == "Cat1"


def test_unknown_kind_is_unresolved(table):
    with pytest.raises(UnresolvedStringReference):
        expand_template("$(other.title)", table)


def test_malformed_resource_names_path():
    with pytest.raises(ResourceLoadFailure) as info:
        load_string_table(b"<policyDefinitionResources><resources>", "en-US/Bad.adml")
    assert info.value.path == "en-US/Bad.adml"


def test_empty_table_lookup_fails():
    with pytest.raises(UnresolvedStringReference):
        StringTable().resolve("string", "anything")
