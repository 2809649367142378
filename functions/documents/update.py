# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

"""Edits of a single document inside its owner's documents record.

Every edit is a compare-and-swap on `mdate`: the caller sends the
modification date it last saw and the edit is rejected when the stored one
differs. The read, the checks and the keyed write of `{id: document}` run
through `DbClient.modify_documents`, i.e. inside one Firestore transaction.

Names of private and public documents are unique within the owner's record;
names of permanent documents are unique across every user's record.
"""

import logging
from dataclasses import replace
from typing import Optional, Union

from backend.db import DbClient
from shared.documents import (
    Document,
    PermanentDocument,
    PrivateDocument,
    PublicDocument,
    Visibility,
    document_to_dict,
    document_to_dto,
    parse_document,
)
from shared.errors import Exists, InvalidArgument, NotFound, OutOfDate
from shared.timestamps import next_stamp
from validation import validators
from validation.payloads import (
    UpdateDocumentCodePayload,
    UpdateDocumentNamePayload,
    UpdatePermanentDocumentPayload,
    UpdatePrivateDocumentPayload,
    UpdatePublicDocumentPayload,
)

logger = logging.getLogger(__name__)

UpdateDocumentPayload = Union[
    UpdatePrivateDocumentPayload,
    UpdatePublicDocumentPayload,
    UpdatePermanentDocumentPayload,
]


class ScopedNameExists(Exists):
    default_message = "Document with provided name already exist"


class GlobalNameExists(Exists):
    default_message = "Document with provided name already exists, please change name"


def permanent_name_taken(db: DbClient, name: str, document_id: str) -> bool:
    """
    Checks whether any user owns a permanent document called `name`, other
    than the document being edited.

    This reads the whole documents collection. It is the single place to
    swap for an indexed name -> document id lookup.
    """
    for _, documents in db.list_documents():
        for other_id, entry in documents.items():
            if (
                other_id != document_id
                and isinstance(entry, dict)
                and entry.get("visibility") == Visibility.PERMANENT
                and entry.get("name") == name
            ):
                return True
    return False


def _scoped_name_taken(documents: dict, name: str, document_id: str) -> bool:
    return any(
        other_id != document_id and isinstance(entry, dict) and entry.get("name") == name
        for other_id, entry in documents.items()
    )


def _get_document(documents: Optional[dict], document_id: str) -> Document:
    if documents is None:
        raise NotFound("Documents collection not found")
    entry = documents.get(document_id)
    if entry is None:
        raise NotFound("Document not found")
    return parse_document(entry)


def _check_mdate(document: Document, mdate: str) -> None:
    if document.mdate != mdate:
        raise OutOfDate("The document has been already changed")


def _check_name(
    db: DbClient,
    documents: dict,
    document_id: str,
    name: str,
    visibility: str,
) -> None:
    if visibility in (Visibility.PRIVATE, Visibility.PUBLIC) and _scoped_name_taken(
        documents, name, document_id
    ):
        raise ScopedNameExists()
    if permanent_name_taken(db, name, document_id):
        raise GlobalNameExists()


def update_document_code(
    db: DbClient, uid: str, payload: UpdateDocumentCodePayload
) -> dict:
    """
    Replaces the code of a document. Code is not required to be unique.

    Returns:
        dict: The new modification date, `{"mdate": ...}`.
    """

    def apply(documents):
        document = _get_document(documents, payload.id)
        _check_mdate(document, payload.mdate)
        mdate = next_stamp(document.mdate)
        updated = replace(document, code=payload.code, mdate=mdate)
        return {payload.id: document_to_dict(updated)}, mdate

    mdate = db.modify_documents(uid, apply)
    logger.info("Updated code of document %s for user %s", payload.id, uid)
    return {"mdate": mdate}


def update_document_name(
    db: DbClient, uid: str, payload: UpdateDocumentNamePayload
) -> dict:
    """
    Renames a document, keeping its visibility. A permanent document also
    gets the path derived from the new name.

    Returns:
        dict: The new modification date, `{"mdate": ...}`.
    """

    def apply(documents):
        document = _get_document(documents, payload.id)
        _check_mdate(document, payload.mdate)
        _check_name(db, documents, payload.id, payload.name, document.visibility)

        mdate = next_stamp(document.mdate)
        if isinstance(document, PermanentDocument):
            updated = replace(
                document,
                name=payload.name,
                path=validators.create_document_path(payload.name),
                mdate=mdate,
            )
        else:
            updated = replace(document, name=payload.name, mdate=mdate)
        return {payload.id: document_to_dict(updated)}, mdate

    mdate = db.modify_documents(uid, apply)
    logger.info("Renamed document %s for user %s", payload.id, uid)
    return {"mdate": mdate}


def _build_document(
    payload: UpdateDocumentPayload, current: Document, mdate: str
) -> Document:
    if isinstance(payload, UpdatePrivateDocumentPayload):
        return PrivateDocument(
            name=payload.name,
            code=payload.code,
            cdate=current.cdate,
            mdate=mdate,
        )
    if isinstance(payload, UpdatePublicDocumentPayload):
        return PublicDocument(
            name=payload.name,
            code=payload.code,
            cdate=current.cdate,
            mdate=mdate,
        )
    if isinstance(payload, UpdatePermanentDocumentPayload):
        return PermanentDocument(
            name=payload.name,
            code=payload.code,
            cdate=current.cdate,
            mdate=mdate,
            description=payload.description,
            path=validators.create_document_path(payload.name),
            tags=list(payload.tags),
        )
    raise InvalidArgument("Wrong visibility value")


def update_document(db: DbClient, uid: str, payload: UpdateDocumentPayload) -> dict:
    """
    Rewrites a document's name, code and visibility (plus description and
    tags for permanent documents) in one edit.

    Returns:
        dict: The stored document with its id.
    """

    def apply(documents):
        current = _get_document(documents, payload.id)
        _check_mdate(current, payload.mdate)
        updated = _build_document(payload, current, next_stamp(current.mdate))
        _check_name(db, documents, payload.id, updated.name, updated.visibility)
        return {payload.id: document_to_dict(updated)}, updated

    updated = db.modify_documents(uid, apply)
    logger.info(
        "Updated document %s for user %s (%s)", payload.id, uid, updated.visibility
    )
    return document_to_dto(payload.id, updated)
