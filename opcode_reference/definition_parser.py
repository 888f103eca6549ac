"""
Fuel VM Instruction Definition Parser

Extracts instruction records from the `impl_instructions!` table in
fuel-asm's lib.rs. Each instruction occupies one line of the form:

    "Adds two registers." 0x10 ADD add [dst: RegId lhs: RegId rhs: RegId]

Usage:
    from opcode_reference.definition_parser import parse_definitions

    for record in parse_definitions(source_text):
        print(record.name, record.opcode_value, record.operand_names)

Anything in the source that does not match the line pattern (Rust code,
comments, doc attributes) is skipped. Extraction never validates hex values
or operand types.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Tuple


# ============================================================================
# Patterns
# ============================================================================

# "<description>" 0x<hex> <NAME> <mnemonic> [<operands>]
DEFINITION_PATTERN = re.compile(r'"(.+)"\s+0x(\w+) (\w+) (\w+) \[(.+)\]')

# <name>: <type>, separated by spaces and/or commas
OPERAND_PATTERN = re.compile(r'(\w+): (\w+)')

# Looks like a definition line, matched or not (used for the report)
CANDIDATE_PATTERN = re.compile(r'0x\w+\s+\w+.*\[')


# ============================================================================
# Data Models
# ============================================================================

@dataclass(frozen=True)
class Operand:
    """One `<name>: <type>` entry of an instruction's operand list."""

    name: str
    type: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "type": self.type}


@dataclass(frozen=True)
class InstructionRecord:
    """A single instruction as declared in the definition source."""

    name: str
    opcode_value: str
    description: str
    operands: Tuple[Operand, ...] = ()
    mnemonic: str = ""

    @property
    def operand_names(self) -> List[str]:
        return [operand.name for operand in self.operands]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "opcodeValue": self.opcode_value,
            "description": self.description,
            "operands": [operand.to_dict() for operand in self.operands],
            "mnemonic": self.mnemonic,
        }

    def __repr__(self) -> str:
        return f"InstructionRecord({self.name}, {self.opcode_value}, {len(self.operands)} operands)"


@dataclass
class ParseStats:
    """Tracks how much of the source looked like a definition line."""

    total_lines: int = 0
    matched: int = 0
    # (line number, line text) for candidates that did not match
    skipped_candidates: List[Tuple[int, str]] = field(default_factory=list)


# ============================================================================
# Parsing
# ============================================================================

def parse_operands(operand_list: str) -> Tuple[Operand, ...]:
    """
    Parse the bracketed operand list of a definition line.

    Examples:
        "dst: RegId lhs: RegId rhs: RegId" → (dst, lhs, rhs)
        "a: u8, b: u8" → (a, b)
        "imm: Imm24" → (imm,)

    Order follows the source; repeated names are kept as-is.
    """
    return tuple(
        Operand(name=name, type=type_name)
        for name, type_name in OPERAND_PATTERN.findall(operand_list)
    )


def parse_definitions(source: str) -> Iterator[InstructionRecord]:
    """
    Lazily yield one InstructionRecord per definition line in `source`.

    Args:
        source: Full text of the instruction definition source

    Yields:
        InstructionRecord for every non-overlapping match, in source order.
        Text between matches is skipped, never reported.
    """
    for match in DEFINITION_PATTERN.finditer(source):
        description, opcode_hex, name, mnemonic, operand_list = match.groups()
        yield InstructionRecord(
            name=name,
            opcode_value=f"0x{opcode_hex}",
            description=description,
            operands=parse_operands(operand_list),
            mnemonic=mnemonic,
        )


def is_candidate_line(line: str) -> bool:
    """Check whether a line looks like it was meant to be a definition."""
    return bool(CANDIDATE_PATTERN.search(line))


def collect_parse_stats(source: str) -> ParseStats:
    """
    Count matched definitions and candidate lines the pattern skipped.

    Used only for the extraction report; parse_definitions() doesn't depend
    on it. A definition may span two lines (description above the opcode),
    so candidates are checked against match spans rather than line by line.
    """
    spans = [match.span() for match in DEFINITION_PATTERN.finditer(source)]
    stats = ParseStats(matched=len(spans))

    offset = 0
    for line_number, line in enumerate(source.splitlines(keepends=True), start=1):
        stats.total_lines += 1
        line_start, offset = offset, offset + len(line)
        if not is_candidate_line(line):
            continue
        if any(start < offset and line_start < end for start, end in spans):
            continue
        stats.skipped_candidates.append((line_number, line.strip()))
    return stats
