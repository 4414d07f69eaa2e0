"""
Document models for AssignScore.

This module defines the request-scoped structures used to represent
submission texts and the corpus they are compared against.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence


@dataclass(frozen=True)
class Document:
    """
    Raw submission text with an opaque identifier.

    Attributes:
        document_id: Identifier of the originating submission
        text: Raw text content (may be empty)
    """
    document_id: str
    text: str = ""

    def __post_init__(self) -> None:
        """Validate document data after initialization."""
        if not isinstance(self.text, str):
            raise ValueError("Document text must be a string")


@dataclass
class Corpus:
    """
    Ordered documents sharing one set of document frequencies.

    The target document, when present, is always the last element so its
    vector is computed against the same statistics as its peers.

    Attributes:
        documents: Documents in corpus order
        has_target: Whether the last document is the evaluation target
    """
    documents: List[Document] = field(default_factory=list)
    has_target: bool = False

    @classmethod
    def for_target(cls, target: Document, peers: Sequence[Document]) -> Corpus:
        """Build a corpus of ``peers`` followed by ``target``."""
        return cls(documents=list(peers) + [target], has_target=True)

    @property
    def texts(self) -> List[str]:
        return [doc.text for doc in self.documents]

    @property
    def target(self) -> Optional[Document]:
        if not self.has_target or not self.documents:
            return None
        return self.documents[-1]

    @property
    def peers(self) -> List[Document]:
        if self.has_target:
            return self.documents[:-1]
        return list(self.documents)

    def __len__(self) -> int:
        return len(self.documents)
