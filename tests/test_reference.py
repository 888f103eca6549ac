import logging

from opcode_reference.definition_parser import parse_definitions
from opcode_reference.docs_loader import DirectoryDocumentStore
from opcode_reference.gas_costs import CostResolver
from opcode_reference.reference import ReferenceItem, assemble_reference, build_reference

SOURCE = '\n'.join([
    '"Adds two registers." 0x10 ADD add [dst: RegId lhs: RegId rhs: RegId]',
    '"Multiplies two registers." 0x1B MUL mul [dst: RegId lhs: RegId rhs: RegId]',
    '"Return from context." 0x24 RET ret [value: RegId]',
    '"Call contract." 0x2D CALL call [target: RegId fwd_coins: RegId asset: RegId gas: RegId]',
    '"Load code." 0x36 LDC ldc [contract: RegId offset: RegId len: RegId]',
])

COST_TABLE = {
    "add": 2,
    "ret_contract": 29,
    "call": {"HeavyOperation": {"base": 12, "gas_per_unit": 4}},
    "ldc": {"LightOperation": {"base": 15, "units_per_gas": 103}},
}


def test_single_instruction_scenario():
    records = list(parse_definitions('"add two registers" 0x10 ADD add [a: u8, b: u8]'))
    items = assemble_reference(records, CostResolver({"add": 3}))
    assert items == [
        ReferenceItem(
            name="ADD",
            opcode_or_address="0x10",
            description="add two registers",
            input="a | b",
            output="",
            minimum_fee=3,
        )
    ]
    assert items[0].to_dict() == {
        "name": "ADD",
        "opcodeOrAddress": "0x10",
        "description": "add two registers",
        "input": "a | b",
        "output": "",
        "minimumFee": 3,
    }


def test_missing_cost_keeps_every_item(caplog):
    records = list(parse_definitions(SOURCE))
    with caplog.at_level(logging.ERROR):
        items = assemble_reference(records, CostResolver(COST_TABLE))

    assert [item.name for item in items] == ["ADD", "MUL", "RET", "CALL", "LDC"]
    assert [item.minimum_fee for item in items] == [2, None, 29, 12, 15]
    assert not items[1].has_known_fee
    assert "Missing gas cost for MUL" in caplog.text


def test_every_item_missing_cost():
    records = list(parse_definitions(SOURCE))
    items = assemble_reference(records, CostResolver({}))
    assert len(items) == len(records)
    assert all(item.minimum_fee is None for item in items)


def test_input_joins_operands_in_order():
    records = list(parse_definitions(SOURCE))
    items = assemble_reference(records, CostResolver(COST_TABLE))
    assert items[3].input == "target | fwd_coins | asset | gas"
    assert all(item.output == "" for item in items)


def test_duplicate_names_are_kept():
    source = '"a" 0x10 ADD add [x: u8]\n"b" 0x11 ADD add [y: u8]'
    items = assemble_reference(parse_definitions(source), CostResolver({"add": 1}))
    assert [(item.name, item.opcode_or_address) for item in items] == [("ADD", "0x10"), ("ADD", "0x11")]


def test_assembly_is_idempotent():
    records = tuple(parse_definitions(SOURCE))
    resolver = CostResolver(COST_TABLE)
    assert assemble_reference(records, resolver) == assemble_reference(records, resolver)


def test_build_reference(tmp_path):
    docs = tmp_path / "opcodes"
    docs.mkdir()
    (docs / "ADD.md").write_text("---\ngroup: Arithmetic\n---\nAdds.\n")
    (docs / "CALL").mkdir()
    (docs / "CALL" / "mainnet.md").write_text("Heavy.")

    build = build_reference(SOURCE, DirectoryDocumentStore(docs))

    assert [record.name for record in build.instructions] == ["ADD", "MUL", "RET", "CALL", "LDC"]
    assert build.item_docs["add"].meta == {"group": "Arithmetic"}
    assert build.gas_docs == {"call": {"mainnet": "Heavy."}}

    data = build.to_dict()
    assert set(data) == {"opcodeDocs", "gasDocs", "instructions"}
    assert data["opcodeDocs"]["add"]["body"] == "<p>Adds.</p>"
    assert data["instructions"][0]["opcodeValue"] == "0x10"
    assert "minimumFee" not in data["instructions"][0]
