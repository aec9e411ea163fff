"""Document store boundary.

The service only needs a handful of document operations: read one
document, write one document, add to a collection, and run a simple
filtered/ordered query. ``InMemoryDocumentStore`` implements them in
process and can be seeded from a JSON file shaped as
``{collection: {doc_id: {...}}}``.
"""

from __future__ import annotations

import copy
import json
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

Document = Dict[str, Any]
WhereClause = Tuple[str, Any]


class DocumentStore(ABC):
    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        raise NotImplementedError()

    @abstractmethod
    async def set(self, collection: str, doc_id: str, data: Document, merge: bool = False) -> Document:
        raise NotImplementedError()

    @abstractmethod
    async def add(self, collection: str, data: Document) -> str:
        raise NotImplementedError()

    @abstractmethod
    async def query(
        self,
        collection: str,
        where: Optional[List[WhereClause]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Document]:
        """Return matching documents, each including its ``id``.

        ``where`` clauses are equality filters. Documents missing the
        ``order_by`` field sort last.
        """
        raise NotImplementedError()


class InMemoryDocumentStore(DocumentStore):
    def __init__(self, seed: Optional[Dict[str, Dict[str, Document]]] = None) -> None:
        self._collections: Dict[str, Dict[str, Document]] = {}
        for collection, docs in (seed or {}).items():
            self._collections[collection] = {str(doc_id): dict(data) for doc_id, data in docs.items()}

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "InMemoryDocumentStore":
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Seed file {path} must contain a JSON object")
        return cls(seed=data)

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        doc = self._collections.get(collection, {}).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def set(self, collection: str, doc_id: str, data: Document, merge: bool = False) -> Document:
        docs = self._collections.setdefault(collection, {})
        current = docs.get(doc_id, {}) if merge else {}
        docs[doc_id] = {**current, **copy.deepcopy(data)}
        return copy.deepcopy(docs[doc_id])

    async def add(self, collection: str, data: Document) -> str:
        doc_id = uuid.uuid4().hex[:20]
        self._collections.setdefault(collection, {})[doc_id] = copy.deepcopy(data)
        return doc_id

    async def query(
        self,
        collection: str,
        where: Optional[List[WhereClause]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Document]:
        docs = [
            {"id": doc_id, **copy.deepcopy(data)}
            for doc_id, data in self._collections.get(collection, {}).items()
        ]
        for field, value in where or []:
            docs = [doc for doc in docs if doc.get(field) == value]
        if order_by:
            present = [doc for doc in docs if doc.get(order_by) is not None]
            missing = [doc for doc in docs if doc.get(order_by) is None]
            present.sort(key=lambda doc: doc[order_by], reverse=descending)
            docs = present + missing
        if limit is not None:
            docs = docs[:limit]
        return docs
