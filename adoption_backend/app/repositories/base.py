# app/repositories/base.py
"""
Shared Firestore plumbing for the document stores.

A ``ListQuery`` is the predicate a service builds for a listing: field filters
Firestore evaluates server-side plus an optional free-text term matched
case-insensitively as a substring (which Firestore cannot do, so it is applied
while streaming).
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from firebase_admin import firestore

from app.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)

# (field, operator, value) as accepted by Query.where
FieldFilter = Tuple[str, str, Any]

_RESERVED_ID = re.compile(r'^__.*__$')


def is_valid_document_id(doc_id: Any) -> bool:
    """Whether Firestore accepts ``doc_id`` as a single document id."""
    if not isinstance(doc_id, str) or doc_id in ('', '.', '..'):
        return False
    if '/' in doc_id or _RESERVED_ID.match(doc_id):
        return False
    return len(doc_id.encode('utf-8')) <= 1500


@dataclass
class TextMatch:
    """Case-insensitive substring match of ``term`` against any of ``fields``."""
    term: str
    fields: Sequence[str]

    def matches(self, data: Dict[str, Any]) -> bool:
        needle = self.term.lower()
        return any(needle in str(data.get(f) or '').lower() for f in self.fields)


@dataclass
class ListQuery:
    filters: List[FieldFilter] = field(default_factory=list)
    text_matches: List[TextMatch] = field(default_factory=list)
    order_by: str = 'created_at'
    descending: bool = True

    def where(self, field_path: str, op: str, value: Any) -> "ListQuery":
        self.filters.append((field_path, op, value))
        return self

    def matching(self, term: str, *fields: str) -> "ListQuery":
        self.text_matches.append(TextMatch(term, fields))
        return self


class FirestoreRepository:
    """Base class binding one collection of a Firestore client."""

    collection_name: str = ''

    def __init__(self, db=None):
        self.db = db if db is not None else firestore.client()
        self.collection = self.db.collection(self.collection_name)

    # --- query building ---
    def _filtered(self, filters: Iterable[FieldFilter]):
        query = self.collection
        for field_path, op, value in filters:
            query = query.where(field_path, op, value)
        return query

    def _ordered(self, list_query: ListQuery):
        query = self._filtered(list_query.filters)
        direction = firestore.Query.DESCENDING if list_query.descending else firestore.Query.ASCENDING
        return query.order_by(list_query.order_by, direction=direction)

    # --- reads ---
    def _document(self, doc_id: str):
        """Reference to ``doc_id``, or None when it cannot name a document in this collection."""
        if not is_valid_document_id(doc_id):
            return None
        return self.collection.document(doc_id)

    def _get_dict(self, doc_id: str) -> Optional[Dict[str, Any]]:
        ref = self._document(doc_id)
        if ref is None:
            return None
        doc = ref.get()
        if not doc.exists:
            return None
        return DateTimeUtils.from_firestore(doc.to_dict())

    def _get_many_dicts(self, doc_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        refs = [self.collection.document(doc_id) for doc_id in dict.fromkeys(doc_ids) if is_valid_document_id(doc_id)]
        if not refs:
            return {}
        return {
            snapshot.id: DateTimeUtils.from_firestore(snapshot.to_dict())
            for snapshot in self.db.get_all(refs)
            if snapshot.exists
        }

    def _find_page_dicts(self, list_query: ListQuery, offset: int, limit: int) -> Tuple[List[Dict[str, Any]], int]:
        """Returns one page of documents and the total number matching ``list_query``."""
        query = self._ordered(list_query)

        if list_query.text_matches:
            matched = [
                data for data in (doc.to_dict() for doc in query.stream())
                if all(m.matches(data) for m in list_query.text_matches)
            ]
            page = matched[offset:offset + limit]
            return [DateTimeUtils.from_firestore(d) for d in page], len(matched)

        docs = query.offset(offset).limit(limit).stream()
        page = [DateTimeUtils.from_firestore(doc.to_dict()) for doc in docs]
        return page, self.count(list_query.filters)

    def count(self, filters: Iterable[FieldFilter] = ()) -> int:
        """Server-side count aggregation over the filtered collection."""
        result = self._filtered(filters).count().get()
        return int(result[0][0].value)

    def distinct(self, field_path: str, filters: Iterable[FieldFilter] = ()) -> List[Any]:
        """Sorted distinct non-empty values of ``field_path`` among matching documents."""
        query = self._filtered(filters).select([field_path])
        values = {doc.to_dict().get(field_path) for doc in query.stream()}
        values.discard(None)
        values.discard('')
        return sorted(values)

    # --- writes ---
    def _update(self, doc_id: str, update_data: Dict[str, Any]) -> bool:
        """Partial update; returns False when the document does not exist."""
        ref = self._document(doc_id)
        if ref is None or not ref.get().exists:
            return False
        payload = dict(update_data)
        payload['updated_at'] = DateTimeUtils.now()
        ref.update(DateTimeUtils.for_firestore(payload))
        return True

    def delete(self, doc_id: str) -> bool:
        ref = self._document(doc_id)
        if ref is None or not ref.get().exists:
            return False
        ref.delete()
        return True

    def _batched(self, refs: List[Any], apply: Callable[[Any, Any], None], chunk_size: int = 500) -> int:
        """Applies ``apply(batch, ref)`` to every ref in WriteBatch chunks (Firestore allows 500 writes)."""
        for i in range(0, len(refs), chunk_size):
            batch = self.db.batch()
            for ref in refs[i:i + chunk_size]:
                apply(batch, ref)
            batch.commit()
        return len(refs)
