"""
Database abstraction for Firestore and an in-memory test implementation.

Every user owns one record in the documents collection whose value maps
document ids to documents. Profiles and ratings live in their own
collections, keyed by uid and document id respectively.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, Optional, Protocol, Tuple, TypeVar

from firebase_admin import firestore

from shared.documents import RATING_CATEGORIES
from shared.firebase_constants import (
    DOCUMENTS_COLLECTION,
    DOCUMENTS_RATES_COLLECTION,
    USERS_PROFILES_COLLECTION,
)

T = TypeVar("T")

# Maps document id -> new stored entry, or None to remove the entry.
DocumentChanges = Dict[str, Optional[dict]]
ApplyChanges = Callable[[Optional[dict]], Tuple[DocumentChanges, T]]


class DbClient(Protocol):
    """Interface for database access."""

    def get_documents(self, uid: str) -> Optional[dict]:
        ...

    def list_documents(self) -> list[tuple[str, dict]]:
        ...

    def modify_documents(self, uid: str, apply: ApplyChanges) -> T:
        ...

    def get_profile(self, uid: str) -> Optional[dict]:
        ...

    def list_profiles(self) -> Dict[str, dict]:
        ...

    def set_profile(self, uid: str, profile: dict) -> None:
        ...

    def get_rating(self, document_id: str) -> Optional[dict]:
        ...

    def list_ratings(self) -> Dict[str, dict]:
        ...

    def increment_rating(self, document_id: str, category: str) -> dict:
        ...

    def delete_rating(self, document_id: str) -> None:
        ...


def _merge_changes(current: Optional[dict], changes: DocumentChanges) -> dict:
    merged = dict(current or {})
    for document_id, entry in changes.items():
        if entry is None:
            merged.pop(document_id, None)
        else:
            merged[document_id] = entry
    return merged


def _incremented(rating: Optional[dict], category: str) -> dict:
    counts = {name: int((rating or {}).get(name, 0)) for name in RATING_CATEGORIES}
    counts[category] += 1
    return counts


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.documents: Dict[str, dict] = {}
        self.profiles: Dict[str, dict] = {}
        self.ratings: Dict[str, dict] = {}
        self._lock = threading.RLock()

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        with self._lock:
            self.documents.clear()
            self.profiles.clear()
            self.ratings.clear()

    def get_documents(self, uid: str) -> Optional[dict]:
        documents = self.documents.get(uid)
        return dict(documents) if documents is not None else None

    def list_documents(self) -> list[tuple[str, dict]]:
        with self._lock:
            return [(uid, dict(docs)) for uid, docs in self.documents.items()]

    def modify_documents(self, uid: str, apply: ApplyChanges) -> T:
        with self._lock:
            current = self.get_documents(uid)
            changes, result = apply(current)
            if changes:
                self.documents[uid] = _merge_changes(current, changes)
            return result

    def get_profile(self, uid: str) -> Optional[dict]:
        return self.profiles.get(uid)

    def list_profiles(self) -> Dict[str, dict]:
        return dict(self.profiles)

    def set_profile(self, uid: str, profile: dict) -> None:
        self.profiles[uid] = profile

    def get_rating(self, document_id: str) -> Optional[dict]:
        return self.ratings.get(document_id)

    def list_ratings(self) -> Dict[str, dict]:
        return dict(self.ratings)

    def increment_rating(self, document_id: str, category: str) -> dict:
        with self._lock:
            counts = _incremented(self.ratings.get(document_id), category)
            self.ratings[document_id] = counts
            return counts

    def delete_rating(self, document_id: str) -> None:
        self.ratings.pop(document_id, None)


class FirestoreDbClient:
    """
    Firestore-backed implementation.

    Writes to a user's documents record run inside a transaction so the
    read, the checks made by `apply` and the write see one consistent record.
    """

    def __init__(self, db: Any):
        self._db = db

    def _documents_ref(self, uid: str):
        return self._db.collection(DOCUMENTS_COLLECTION).document(uid)

    def get_documents(self, uid: str) -> Optional[dict]:
        snapshot = self._documents_ref(uid).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict() or {}

    def list_documents(self) -> list[tuple[str, dict]]:
        return [
            (snapshot.id, snapshot.to_dict() or {})
            for snapshot in self._db.collection(DOCUMENTS_COLLECTION).stream()
        ]

    def modify_documents(self, uid: str, apply: ApplyChanges) -> T:
        doc_ref = self._documents_ref(uid)
        transaction = self._db.transaction()

        @firestore.transactional
        def _modify_transaction(transaction, doc_ref):
            snapshot = doc_ref.get(transaction=transaction)
            current = (snapshot.to_dict() or {}) if snapshot.exists else None
            changes, result = apply(current)

            if not changes:
                return result

            if current is None:
                transaction.set(doc_ref, _merge_changes(None, changes))
            else:
                transaction.update(
                    doc_ref,
                    {
                        document_id: firestore.DELETE_FIELD if entry is None else entry
                        for document_id, entry in changes.items()
                    },
                )
            return result

        return _modify_transaction(transaction, doc_ref)

    def get_profile(self, uid: str) -> Optional[dict]:
        snapshot = self._db.collection(USERS_PROFILES_COLLECTION).document(uid).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict()

    def list_profiles(self) -> Dict[str, dict]:
        return {
            snapshot.id: snapshot.to_dict()
            for snapshot in self._db.collection(USERS_PROFILES_COLLECTION).stream()
        }

    def set_profile(self, uid: str, profile: dict) -> None:
        self._db.collection(USERS_PROFILES_COLLECTION).document(uid).set(profile)

    def get_rating(self, document_id: str) -> Optional[dict]:
        snapshot = (
            self._db.collection(DOCUMENTS_RATES_COLLECTION).document(document_id).get()
        )
        if not snapshot.exists:
            return None
        return snapshot.to_dict()

    def list_ratings(self) -> Dict[str, dict]:
        return {
            snapshot.id: snapshot.to_dict()
            for snapshot in self._db.collection(DOCUMENTS_RATES_COLLECTION).stream()
        }

    def increment_rating(self, document_id: str, category: str) -> dict:
        doc_ref = self._db.collection(DOCUMENTS_RATES_COLLECTION).document(document_id)
        transaction = self._db.transaction()

        @firestore.transactional
        def _increment_transaction(transaction, doc_ref):
            snapshot = doc_ref.get(transaction=transaction)
            counts = _incremented(
                snapshot.to_dict() if snapshot.exists else None, category
            )
            transaction.set(doc_ref, counts)
            return counts

        return _increment_transaction(transaction, doc_ref)

    def delete_rating(self, document_id: str) -> None:
        self._db.collection(DOCUMENTS_RATES_COLLECTION).document(document_id).delete()
