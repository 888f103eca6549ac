"""
Instruction documentation loader.

Documentation lives in a store laid out like docs/opcodes/:

    docs/opcodes/
        ADD.md            front matter + Markdown body → item docs for "add"
        CALL/             one file per fork            → gas docs for "call"
            beta-4.md
            mainnet.md

Entries are loaded concurrently. Any entry that fails to read or parse is
logged at debug level and left out; it never fails the batch.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple, Union

import frontmatter
import markdown

from opcode_reference.errors import DocumentStoreError

logger = logging.getLogger(__name__)

# Markdown extensions used when rendering instruction bodies
MARKDOWN_EXTENSIONS = ["tables", "fenced_code"]


# ============================================================================
# Data Models
# ============================================================================

@dataclass(frozen=True)
class DocumentationEntry:
    """Front matter and rendered body for one instruction."""

    meta: Dict[str, Any]
    body: str

    def to_dict(self) -> Dict[str, Any]:
        return {"meta": self.meta, "body": self.body}


# fork identifier → raw Markdown explaining the gas cost in that fork
GasForkDocumentation = Dict[str, str]


@dataclass(frozen=True)
class LoadOutcome:
    """
    Result of loading one store entry.

    Exactly one of `documentation`, `forks` or `error` is set.
    """

    key: str
    documentation: Optional[DocumentationEntry] = None
    forks: Optional[GasForkDocumentation] = None
    error: Optional[Exception] = None

    @property
    def kind(self) -> str:
        if self.documentation is not None:
            return "documentation"
        if self.forks is not None:
            return "gas"
        return "absent"


@dataclass
class LoadedDocumentation:
    item_docs: Dict[str, DocumentationEntry] = field(default_factory=dict)
    gas_docs: Dict[str, GasForkDocumentation] = field(default_factory=dict)
    failed: List[str] = field(default_factory=list)


# ============================================================================
# Document Stores
# ============================================================================

class DocumentStore(Protocol):
    """Where documentation entries come from."""

    def names(self) -> Iterable[str]:
        ...

    def is_group(self, name: str) -> bool:
        ...

    def read(self, name: str) -> str:
        ...

    def read_group(self, name: str) -> Dict[str, str]:
        ...


class DirectoryDocumentStore:
    """A DocumentStore backed by a directory on disk."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def names(self) -> List[str]:
        return sorted(path.name for path in self.root.iterdir())

    def is_group(self, name: str) -> bool:
        return (self.root / name).is_dir()

    def read(self, name: str) -> str:
        return (self.root / name).read_text(encoding="utf-8")

    def read_group(self, name: str) -> Dict[str, str]:
        group_dir = self.root / name
        return {
            path.stem: path.read_text(encoding="utf-8")
            for path in sorted(group_dir.iterdir())
        }

    def __repr__(self) -> str:
        return f"DirectoryDocumentStore({self.root})"


# ============================================================================
# Parsing
# ============================================================================

def entry_key(name: str, is_group: bool = False) -> str:
    """
    Instruction key for a store entry name.

    Examples:
        ADD.md → add
        ADD.txt → add
        CALL (group) → call
    """
    if is_group:
        return name.lower()
    return Path(name).stem.lower()


def parse_document(text: str) -> DocumentationEntry:
    """Split front matter from the body and render the body to HTML."""
    post = frontmatter.loads(text)
    body = markdown.markdown(post.content, extensions=MARKDOWN_EXTENSIONS)
    return DocumentationEntry(meta=dict(post.metadata), body=body)


# ============================================================================
# Loading
# ============================================================================

async def load_entry(store: DocumentStore, name: str) -> LoadOutcome:
    """Load one store entry; failures come back as an absent outcome."""
    key = entry_key(name)
    try:
        if await asyncio.to_thread(store.is_group, name):
            key = entry_key(name, is_group=True)
            forks = await asyncio.to_thread(store.read_group, name)
            return LoadOutcome(key=key, forks=dict(forks))

        text = await asyncio.to_thread(store.read, name)
        return LoadOutcome(key=key, documentation=parse_document(text))
    except Exception as e:
        logger.debug("Couldn't read the Markdown doc for the opcode %s: %s", key, e)
        return LoadOutcome(key=key, error=e)


def join_outcomes(outcomes: Iterable[LoadOutcome]) -> LoadedDocumentation:
    loaded = LoadedDocumentation()
    for outcome in outcomes:
        if outcome.kind == "documentation":
            loaded.item_docs[outcome.key] = outcome.documentation
        elif outcome.kind == "gas":
            loaded.gas_docs[outcome.key] = outcome.forks
        else:
            loaded.failed.append(outcome.key)
    return loaded


async def load_documentation(store: DocumentStore) -> LoadedDocumentation:
    """
    Load every entry of `store` concurrently.

    Args:
        store: Source of documentation entries

    Returns:
        LoadedDocumentation with item docs and gas docs keyed by lowercase
        instruction name. Entries that failed are listed in `failed`.
    """
    try:
        names = await asyncio.to_thread(lambda: list(store.names()))
    except OSError as e:
        raise DocumentStoreError(f"Cannot list documentation store {store!r}: {e}") from e
    outcomes = await asyncio.gather(*(load_entry(store, name) for name in names))
    loaded = join_outcomes(outcomes)
    logger.info(
        "Loaded docs for %d instructions, gas docs for %d, skipped %d",
        len(loaded.item_docs), len(loaded.gas_docs), len(loaded.failed),
    )
    return loaded


def load_documentation_sync(store: DocumentStore) -> Tuple[Dict[str, DocumentationEntry],
                                                          Dict[str, GasForkDocumentation]]:
    """Blocking wrapper returning (item_docs, gas_docs)."""
    loaded = asyncio.run(load_documentation(store))
    return loaded.item_docs, loaded.gas_docs
