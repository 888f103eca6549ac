#!/usr/bin/env python3
"""
Quick inspection tool for the generated opcodes.json

Usage:
    python -m opcode_reference.inspect_reference                 # Show statistics
    python -m opcode_reference.inspect_reference <name>          # Show specific instruction
    python -m opcode_reference.inspect_reference --missing       # List undocumented instructions
"""

import argparse
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from opcode_reference.extract_reference import DEFAULT_OUTPUT_JSON


def load_reference(path: Path) -> Dict[str, Any]:
    """Load the JSON written by extract_reference."""
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def undocumented_instructions(reference: Dict[str, Any]) -> List[Dict[str, Any]]:
    docs = reference.get('opcodeDocs', {})
    return [inst for inst in reference.get('instructions', []) if inst['name'].lower() not in docs]


def show_statistics(reference):
    """Display statistics about documentation coverage."""
    instructions = reference.get('instructions', [])
    total = len(instructions)
    missing = len(undocumented_instructions(reference))
    with_gas_docs = sum(1 for inst in instructions if inst['name'].lower() in reference.get('gasDocs', {}))

    print("=" * 80)
    print("DOCUMENTATION COVERAGE STATISTICS")
    print("=" * 80)
    print(f"\nTotal instructions:      {total}")
    if total:
        print(f"With documentation:      {total - missing} ({100*(total - missing)/total:.1f}%)")
        print(f"Without documentation:   {missing} ({100*missing/total:.1f}%)")
        print(f"With gas docs:           {with_gas_docs}")
    print("\n" + "=" * 80)


def show_instruction(reference, name):
    """Display a specific instruction with its documentation."""
    matches = [inst for inst in reference.get('instructions', []) if inst['name'].upper() == name.upper()]

    if not matches:
        print(f"No instruction found with name: {name}")
        return

    doc = reference.get('opcodeDocs', {}).get(name.lower())
    forks = reference.get('gasDocs', {}).get(name.lower(), {})

    for inst in matches:
        print("=" * 80)
        print(f"Instruction: {inst['name']} ({inst.get('mnemonic', '')})")
        print("=" * 80)
        print(f"Opcode:      {inst.get('opcodeValue', 'N/A')}")
        print(f"Operands:    {', '.join(op['name'] + ': ' + op['type'] for op in inst.get('operands', []))}")
        print(f"\nDescription:\n{inst.get('description', 'N/A')}")
        if doc:
            print(f"\nFront matter: {doc.get('meta', {})}")
        else:
            print("\n(No documentation available)")
        if forks:
            print(f"Gas docs:    {', '.join(sorted(forks))}")
        print("=" * 80)
        print()


def show_missing(reference):
    """List all instructions without documentation."""
    missing = undocumented_instructions(reference)

    print("=" * 80)
    print(f"INSTRUCTIONS MISSING DOCUMENTATION ({len(missing)} total)")
    print("=" * 80)

    if missing:
        for inst in missing:
            print(f"\n{inst['name']:10} | {inst.get('opcodeValue', 'N/A'):6}")
            print(f"  Description: {inst.get('description', 'N/A')[:70]}")
    else:
        print("\nAll instructions are documented!")

    print("=" * 80)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Inspect the generated opcode reference")
    parser.add_argument("name", nargs="?", help="Instruction to show")
    parser.add_argument("--missing", action="store_true", help="List undocumented instructions")
    parser.add_argument("--input", type=Path, default=DEFAULT_OUTPUT_JSON)
    args = parser.parse_args(argv)

    reference = load_reference(args.input)

    if args.missing:
        show_missing(reference)
    elif args.name:
        show_instruction(reference, args.name)
    else:
        show_statistics(reference)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
