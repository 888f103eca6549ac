"""
Gas-cost lookup for Fuel VM instructions.

The chain specification keys its gas-cost table by lowercase instruction
name, but a handful of instructions are priced under a different key (the
contract variants of RET/RVRT/RETD, the immediate forms of CFE/CFS, and
ECAL which shares CALL's entry). OPCODE_ALIASES records those mismatches.

Cost entries come in three shapes:

    "add": 2                                   plain number
    "call": {"HeavyOperation": {"base": 12}}   structured, heavy
    "ldc":  {"LightOperation": {"base": 15}}   structured, light

Usage:
    table = load_cost_table("chainspec.json")
    resolver = CostResolver(table)
    resolver.minimum_fee("RET")   # looks up "ret_contract"
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Union

import yaml

from opcode_reference.errors import CostTableError

logger = logging.getLogger(__name__)

Fee = Union[int, float]


# ============================================================================
# Configuration
# ============================================================================

# lowercase instruction name → cost-table key
OPCODE_ALIASES: Mapping[str, str] = {
    "ret": "ret_contract",
    "rvrt": "rvrt_contract",
    "retd": "retd_contract",
    "cfe": "cfei",
    "cfs": "cfsi",
    "ecal": "call",
}

# Path from the chain-spec root down to the per-instruction gas costs
DEFAULT_VERSION_PATH = ("consensus_parameters", "V1", "gas_costs", "V1")

# Structured entry kinds in precedence order, compared after normalize_key()
STRUCTURED_KINDS = ("lightoperation", "heavyoperation")


# ============================================================================
# Name Reconciliation
# ============================================================================

def reconcile_name(name: str, aliases: Mapping[str, str] = OPCODE_ALIASES) -> str:
    """
    Map an instruction name to the key used by the cost table.

    Examples:
        ADD → add
        RET → ret_contract
        ECAL → call

    Always returns a key, whether or not the table contains it.
    """
    lowered = name.lower()
    return aliases.get(lowered, lowered)


# ============================================================================
# Cost Normalization
# ============================================================================

def normalize_key(key: str) -> str:
    """LightOperation, light_operation and light-operation all compare equal."""
    return re.sub(r'[-_]', '', str(key)).lower()


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def structured_base(entry: Mapping[str, Any], kind: str) -> Optional[Fee]:
    """Return entry[<kind>]["base"] if present and numeric."""
    for key, value in entry.items():
        if normalize_key(key) != kind or not isinstance(value, Mapping):
            continue
        base = value.get("base")
        if is_number(base):
            return base
    return None


def normalize_cost(entry: Any) -> Optional[Fee]:
    """
    Reduce a raw cost entry to a single fee.

    Precedence: light-operation base, then heavy-operation base, then the
    entry itself if it is a number. Anything else (missing entry, a mapping
    with neither field) yields None, the unknown fee.
    """
    if entry is None:
        return None

    if isinstance(entry, Mapping):
        for kind in STRUCTURED_KINDS:
            base = structured_base(entry, kind)
            if base is not None:
                return base

    if is_number(entry):
        return entry

    return None


# ============================================================================
# Resolver
# ============================================================================

class CostResolver:
    """Looks up minimum fees for instruction names in a pre-loaded cost table."""

    def __init__(self, cost_table: Mapping[str, Any],
                 aliases: Mapping[str, str] = OPCODE_ALIASES):
        self.cost_table = cost_table
        self.aliases = aliases

    def lookup(self, name: str) -> Optional[Any]:
        """
        Return the raw cost entry for `name`, or None if the table lacks it.

        A miss is logged but never raised.
        """
        key = reconcile_name(name, self.aliases)
        entry = self.cost_table.get(key)
        if entry is None:
            logger.error("Missing gas cost for %s (looked up as %r)", name, key)
        return entry

    def minimum_fee(self, name: str) -> Optional[Fee]:
        entry = self.lookup(name)
        fee = normalize_cost(entry)
        if entry is not None and fee is None:
            logger.warning("Unrecognized gas cost entry for %s: %r", name, entry)
        return fee


# ============================================================================
# Chain Spec Loading
# ============================================================================

def load_chain_spec(path: Path) -> Dict[str, Any]:
    """Read a chain-spec file; YAML by extension, JSON otherwise."""
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() in {".yaml", ".yml"}:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise CostTableError(f"Cannot read chain spec {path}: {e}") from e

    if not isinstance(data, dict):
        raise CostTableError(f"{path.name}: root must be a mapping")
    return data


def select_cost_table(chain_spec: Mapping[str, Any],
                      version_path: Sequence[str] = DEFAULT_VERSION_PATH) -> Mapping[str, Any]:
    """
    Walk `version_path` down the chain spec to the per-instruction table.

    Raises:
        CostTableError: a path segment is missing or doesn't lead to a mapping
    """
    node: Any = chain_spec
    walked = []
    for segment in version_path:
        walked.append(segment)
        if not isinstance(node, Mapping) or segment not in node:
            raise CostTableError(f"Chain spec has no gas costs at {'.'.join(walked)}")
        node = node[segment]

    if not isinstance(node, Mapping):
        raise CostTableError(f"Gas costs at {'.'.join(walked)} are not a mapping")
    return node


def load_cost_table(path: Union[str, Path],
                    version_path: Sequence[str] = DEFAULT_VERSION_PATH) -> Mapping[str, Any]:
    """Load the gas-cost table for one chain-spec version from a file."""
    chain_spec = load_chain_spec(Path(path))
    table = select_cost_table(chain_spec, version_path)
    logger.debug("Loaded %d gas cost entries from %s", len(table), path)
    return table
