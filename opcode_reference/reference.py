"""
Reference table assembly.

Joins parsed instruction records with their resolved minimum fees into the
rows rendered by the reference table, and bundles the values handed to the
rendering layer.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from opcode_reference.definition_parser import InstructionRecord, parse_definitions
from opcode_reference.docs_loader import (
    DocumentationEntry,
    DocumentStore,
    GasForkDocumentation,
    load_documentation_sync,
)
from opcode_reference.gas_costs import CostResolver, Fee

logger = logging.getLogger(__name__)

INPUT_SEPARATOR = " | "


@dataclass(frozen=True)
class ReferenceItem:
    """One row of the reference table."""

    name: str
    opcode_or_address: str
    description: str
    input: str
    output: str
    minimum_fee: Optional[Fee]

    @property
    def has_known_fee(self) -> bool:
        return self.minimum_fee is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "opcodeOrAddress": self.opcode_or_address,
            "description": self.description,
            "input": self.input,
            "output": self.output,
            "minimumFee": self.minimum_fee,
        }


@dataclass
class ReferenceBuild:
    """
    Everything the rendering layer receives.

    Fees are not stored here; consumers derive them with assemble_reference()
    against the cost table they render with.
    """

    item_docs: Dict[str, DocumentationEntry] = field(default_factory=dict)
    gas_docs: Dict[str, GasForkDocumentation] = field(default_factory=dict)
    instructions: List[InstructionRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "opcodeDocs": {key: doc.to_dict() for key, doc in self.item_docs.items()},
            "gasDocs": self.gas_docs,
            "instructions": [record.to_dict() for record in self.instructions],
        }


def build_item(record: InstructionRecord, resolver: CostResolver) -> ReferenceItem:
    return ReferenceItem(
        name=record.name,
        opcode_or_address=record.opcode_value,
        description=record.description,
        input=INPUT_SEPARATOR.join(record.operand_names),
        output="",
        minimum_fee=resolver.minimum_fee(record.name),
    )


def assemble_reference(instructions: Iterable[InstructionRecord],
                       resolver: CostResolver) -> List[ReferenceItem]:
    """
    Build one ReferenceItem per instruction, in input order.

    Records sharing a name are not merged. An instruction without a known fee
    still gets a row, with minimum_fee set to None.
    """
    return [build_item(record, resolver) for record in instructions]


def build_reference(source: str, store: DocumentStore) -> ReferenceBuild:
    """
    Parse the definition source and load documentation for it.

    Args:
        source: Text of the instruction definition source, already fetched
        store: Documentation store

    Returns:
        ReferenceBuild with item docs, gas docs and the raw instruction records
    """
    instructions = list(parse_definitions(source))
    logger.info("Parsed %d instructions", len(instructions))

    item_docs, gas_docs = load_documentation_sync(store)
    return ReferenceBuild(item_docs=item_docs, gas_docs=gas_docs, instructions=instructions)
