"""Fuel VM opcode reference builder."""

from opcode_reference.definition_parser import InstructionRecord, Operand, parse_definitions
from opcode_reference.docs_loader import DirectoryDocumentStore, DocumentationEntry, load_documentation
from opcode_reference.errors import (
    CostTableError, DocumentStoreError, OpcodeReferenceError, SourceRetrievalError
)
from opcode_reference.gas_costs import OPCODE_ALIASES, CostResolver, load_cost_table, reconcile_name
from opcode_reference.reference import ReferenceBuild, ReferenceItem, assemble_reference, build_reference

__all__ = [
    "CostResolver",
    "CostTableError",
    "DirectoryDocumentStore",
    "DocumentStoreError",
    "DocumentationEntry",
    "InstructionRecord",
    "OPCODE_ALIASES",
    "OpcodeReferenceError",
    "Operand",
    "ReferenceBuild",
    "ReferenceItem",
    "SourceRetrievalError",
    "assemble_reference",
    "build_reference",
    "load_cost_table",
    "load_documentation",
    "parse_definitions",
    "reconcile_name",
]
