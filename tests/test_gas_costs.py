import json
import logging

import pytest

from opcode_reference.errors import CostTableError
from opcode_reference.gas_costs import (
    OPCODE_ALIASES, CostResolver, load_cost_table, normalize_cost, reconcile_name, select_cost_table
)


# --- reconcile_name ---
@pytest.mark.parametrize("name, key", [
    ("ADD", "add"),
    ("add", "add"),
    ("JMPF", "jmpf"),
    ("RET", "ret_contract"),
    ("ret", "ret_contract"),
    ("RVRT", "rvrt_contract"),
    ("RETD", "retd_contract"),
    ("CFE", "cfei"),
    ("CFS", "cfsi"),
    ("ECAL", "call"),
])
def test_reconcile_name(name, key):
    assert reconcile_name(name) == key


def test_reconcile_name_with_custom_aliases():
    assert reconcile_name("FOO", {"foo": "bar"}) == "bar"
    assert reconcile_name("RET", {}) == "ret"


def test_aliases_are_lowercase():
    assert all(name == name.lower() for name in OPCODE_ALIASES)


# --- normalize_cost ---
@pytest.mark.parametrize("entry, fee", [
    (7, 7),
    (0, 0),
    ({"light-operation": {"base": 5}, "heavy-operation": {"base": 9}}, 5),
    ({"heavy-operation": {"base": 9}}, 9),
    ({"LightOperation": {"base": 15, "units_per_gas": 103}}, 15),
    ({"HeavyOperation": {"base": 2, "gas_per_unit": 0}}, 2),
    ({"light_operation": {"base": 4}}, 4),
    ({"light-operation": {}, "heavy-operation": {"base": 9}}, 9),
    ({"light-operation": {"base": 0}, "heavy-operation": {"base": 9}}, 0),
])
def test_normalize_cost_precedence(entry, fee):
    assert normalize_cost(entry) == fee


@pytest.mark.parametrize("entry", [
    None,
    {},
    {"units_per_gas": 3},
    "12",
    True,
])
def test_normalize_cost_unknown(entry):
    assert normalize_cost(entry) is None


# --- CostResolver ---
def test_resolver_uses_alias():
    resolver = CostResolver({"ret_contract": 29, "ret": 1})
    assert resolver.minimum_fee("RET") == 29


def test_resolver_missing_entry_logs_and_returns_none(caplog):
    resolver = CostResolver({"add": 3})
    with caplog.at_level(logging.ERROR, logger="opcode_reference.gas_costs"):
        assert resolver.minimum_fee("MUL") is None
    assert "Missing gas cost for MUL" in caplog.text


def test_resolver_unrecognized_entry_warns(caplog):
    resolver = CostResolver({"add": {"weird": 1}})
    with caplog.at_level(logging.WARNING, logger="opcode_reference.gas_costs"):
        assert resolver.minimum_fee("ADD") is None
    assert "Unrecognized gas cost entry for ADD" in caplog.text


def test_resolver_lookup_returns_raw_entry():
    entry = {"HeavyOperation": {"base": 2}}
    assert CostResolver({"call": entry}).lookup("ECAL") is entry


# --- chain spec loading ---
CHAIN_SPEC = {
    "chain_name": "local",
    "consensus_parameters": {
        "V1": {
            "gas_costs": {
                "V1": {
                    "add": 2,
                    "call": {"HeavyOperation": {"base": 12, "gas_per_unit": 4}},
                }
            }
        }
    },
}


def test_load_cost_table_json(tmp_path):
    path = tmp_path / "chainspec.json"
    path.write_text(json.dumps(CHAIN_SPEC))
    table = load_cost_table(path)
    assert table["add"] == 2
    assert CostResolver(table).minimum_fee("ECAL") == 12


def test_load_cost_table_yaml(tmp_path):
    path = tmp_path / "chainspec.yaml"
    path.write_text(
        "consensus_parameters:\n"
        "  V1:\n"
        "    gas_costs:\n"
        "      V1:\n"
        "        add: 2\n"
        "        ldc:\n"
        "          LightOperation:\n"
        "            base: 15\n"
    )
    table = load_cost_table(path)
    assert CostResolver(table).minimum_fee("LDC") == 15


def test_load_cost_table_custom_version_path(tmp_path):
    path = tmp_path / "costs.json"
    path.write_text(json.dumps({"gas": {"add": 1}}))
    assert load_cost_table(path, ["gas"]) == {"add": 1}


@pytest.mark.parametrize("spec", [
    {},
    {"consensus_parameters": {"V2": {}}},
    {"consensus_parameters": {"V1": {"gas_costs": {"V1": 5}}}},
])
def test_select_cost_table_rejects_bad_paths(spec):
    with pytest.raises(CostTableError):
        select_cost_table(spec)


def test_load_chain_spec_rejects_non_mapping(tmp_path):
    path = tmp_path / "chainspec.json"
    path.write_text("[1, 2, 3]")
    with pytest.raises(CostTableError):
        load_cost_table(path)


@pytest.mark.parametrize("filename, content", [
    ("chainspec.json", "{not json"),
    ("chainspec.yaml", "a: [unclosed"),
])
def test_load_chain_spec_rejects_unparseable_files(tmp_path, filename, content):
    path = tmp_path / filename
    path.write_text(content)
    with pytest.raises(CostTableError):
        load_cost_table(path)


def test_load_chain_spec_missing_file(tmp_path):
    with pytest.raises(CostTableError):
        load_cost_table(tmp_path / "nope.json")
