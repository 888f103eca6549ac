#!/usr/bin/env python3
"""
Fuel VM Opcode Reference Extractor

Fetches the instruction table from fuel-asm, correlates it with the chain
spec's gas costs and the per-opcode Markdown docs, and writes the data the
reference page is rendered from.

Sources:
- https://github.com/FuelLabs/fuel-vm/raw/master/fuel-asm/src/lib.rs
- data/chainspec.json (consensus_parameters.V1.gas_costs.V1)
- docs/opcodes/

Usage:
    python -m opcode_reference.extract_reference
    python -m opcode_reference.extract_reference --source-file lib.rs -v
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import requests
from bs4 import BeautifulSoup

from opcode_reference.definition_parser import ParseStats, collect_parse_stats
from opcode_reference.docs_loader import DirectoryDocumentStore
from opcode_reference.errors import OpcodeReferenceError, SourceRetrievalError
from opcode_reference.gas_costs import DEFAULT_VERSION_PATH, CostResolver, load_cost_table
from opcode_reference.reference import ReferenceBuild, ReferenceItem, assemble_reference, build_reference


# ============================================================================
# Configuration
# ============================================================================

DEFINITIONS_URL = "https://github.com/FuelLabs/fuel-vm/raw/master/fuel-asm/src/lib.rs"
REQUEST_TIMEOUT = 60

DEFAULT_CHAIN_SPEC = Path("data") / "chainspec.json"
DEFAULT_DOCS_DIR = Path("docs") / "opcodes"
DEFAULT_OUTPUT_JSON = Path("data") / "opcodes.json"
DEFAULT_OUTPUT_REPORT = Path("extraction_report.txt")

# Characters of documentation body shown per instruction in the report
EXCERPT_LENGTH = 80


# ============================================================================
# Retrieval
# ============================================================================

def fetch_source(url: str = DEFINITIONS_URL, timeout: int = REQUEST_TIMEOUT) -> str:
    """
    Fetch the instruction definition source.

    Raises:
        SourceRetrievalError: request failed or returned an empty body
    """
    print(f"Fetching {url}...")
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise SourceRetrievalError(url, str(e)) from e

    if not response.text.strip():
        raise SourceRetrievalError(url, "empty response body")

    print(f"✓ Downloaded {len(response.content):,} bytes")
    return response.text


def read_source_file(path: Path) -> str:
    """Read a local copy of the definition source instead of fetching it."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SourceRetrievalError(str(path), str(e)) from e
    if not text.strip():
        raise SourceRetrievalError(str(path), "file is empty")
    return text


# ============================================================================
# Report
# ============================================================================

def plain_text_excerpt(html: str, length: int = EXCERPT_LENGTH) -> str:
    """First `length` characters of a rendered body, without markup."""
    text = " ".join(BeautifulSoup(html, "lxml").get_text(" ").split())
    if len(text) > length:
        return text[:length].rstrip() + "..."
    return text


def generate_report(build: ReferenceBuild, items: List[ReferenceItem], stats: ParseStats) -> str:
    """Generate a human-readable extraction report."""
    lines = []
    lines.append("=" * 70)
    lines.append("FUEL VM OPCODE REFERENCE EXTRACTION REPORT")
    lines.append("=" * 70)
    lines.append("")

    unknown_fee = [item.name for item in items if not item.has_known_fee]
    undocumented = [
        record.name for record in build.instructions
        if record.name.lower() not in build.item_docs
    ]

    lines.append(f"Total instructions: {len(build.instructions)}")
    lines.append(f"  With documentation: {len(build.instructions) - len(undocumented)}")
    lines.append(f"  With gas docs: {sum(1 for r in build.instructions if r.name.lower() in build.gas_docs)}")
    lines.append(f"  Unknown minimum fee: {len(unknown_fee)}")
    lines.append(f"Source lines scanned: {stats.total_lines}")
    lines.append(f"Candidate lines skipped: {len(stats.skipped_candidates)}")
    lines.append("")

    if stats.skipped_candidates:
        lines.append("SKIPPED CANDIDATE LINES")
        lines.append("-" * 70)
        for line_number, text in stats.skipped_candidates:
            lines.append(f"  {line_number:5d}: {text}")
        lines.append("")

    if unknown_fee:
        lines.append("UNKNOWN MINIMUM FEE")
        lines.append("-" * 70)
        lines.append(f"  {', '.join(unknown_fee)}")
        lines.append("")

    if undocumented:
        lines.append("NO DOCUMENTATION")
        lines.append("-" * 70)
        lines.append(f"  {', '.join(undocumented)}")
        lines.append("")

    lines.append("REFERENCE TABLE")
    lines.append("-" * 70)
    for item in items:
        fee = item.minimum_fee if item.has_known_fee else "?"
        lines.append(f"  {item.opcode_or_address:6s} {item.name:8s} fee={fee!s:6s} [{item.input}]")
        doc = build.item_docs.get(item.name.lower())
        if doc is not None:
            lines.append(f"         {plain_text_excerpt(doc.body)}")
        forks = build.gas_docs.get(item.name.lower())
        if forks:
            lines.append(f"         gas docs: {', '.join(sorted(forks))}")

    return '\n'.join(lines) + '\n'


# ============================================================================
# Main Pipeline
# ============================================================================

def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build the Fuel VM opcode reference data")
    parser.add_argument("--source-url", default=DEFINITIONS_URL,
                        help="URL of fuel-asm's lib.rs")
    parser.add_argument("--source-file", type=Path,
                        help="Read the definition source from a local file instead")
    parser.add_argument("--chain-spec", type=Path, default=DEFAULT_CHAIN_SPEC,
                        help="Chain spec JSON/YAML holding the gas costs")
    parser.add_argument("--gas-costs-path", default=".".join(DEFAULT_VERSION_PATH),
                        help="Dotted path to the gas-cost table inside the chain spec")
    parser.add_argument("--docs", type=Path, default=DEFAULT_DOCS_DIR,
                        help="Directory of per-opcode Markdown docs")
    parser.add_argument("--output", type=Path, default=DEFAULT_OUTPUT_JSON)
    parser.add_argument("--report", type=Path, default=DEFAULT_OUTPUT_REPORT)
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    return parser.parse_args(argv)


def write_json(data: Dict, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        # front matter may carry dates
        json.dump(data, f, indent=2, ensure_ascii=False, default=str)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main extraction pipeline."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    print("=" * 70)
    print("FUEL VM OPCODE REFERENCE EXTRACTOR")
    print("=" * 70)
    print()

    try:
        if args.source_file:
            source = read_source_file(args.source_file)
        else:
            source = fetch_source(args.source_url)

        cost_table = load_cost_table(args.chain_spec, args.gas_costs_path.split("."))
        build = build_reference(source, DirectoryDocumentStore(args.docs))
    except OpcodeReferenceError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1

    if not build.instructions:
        print("✗ No instructions extracted. Exiting.", file=sys.stderr)
        return 1

    print(f"✓ Extracted {len(build.instructions)} instructions")
    print(f"✓ Loaded docs for {len(build.item_docs)} opcodes, gas docs for {len(build.gas_docs)}")

    items = assemble_reference(build.instructions, CostResolver(cost_table))
    stats = collect_parse_stats(source)

    print("\n" + "=" * 70)
    print("GENERATING OUTPUTS")
    print("=" * 70)

    write_json(build.to_dict(), args.output)
    print(f"✓ Wrote {len(build.instructions)} instructions to {args.output}")

    args.report.parent.mkdir(parents=True, exist_ok=True)
    with open(args.report, 'w', encoding='utf-8') as f:
        f.write(generate_report(build, items, stats))
    print(f"✓ Wrote report to {args.report}")

    print("\n" + "=" * 70)
    print("EXTRACTION COMPLETE")
    print("=" * 70)
    print(f"Total instructions: {len(items)}")
    print(f"Unknown minimum fee: {sum(1 for item in items if not item.has_known_fee)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
