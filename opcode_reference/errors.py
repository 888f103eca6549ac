"""Exceptions raised by the opcode reference builder."""


class OpcodeReferenceError(Exception):
    """Base class for failures that abort a reference build."""


class SourceRetrievalError(OpcodeReferenceError):
    """The instruction definition source could not be fetched."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class CostTableError(OpcodeReferenceError):
    """The chain specification does not contain a usable gas-cost table."""


class DocumentStoreError(OpcodeReferenceError):
    """The documentation store itself could not be listed."""
