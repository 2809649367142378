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

import unittest
from unittest.mock import patch

from backend.db import InMemoryDbClient
from documents import update
from shared.documents import (
    PermanentDocument,
    PrivateDocument,
    PublicDocument,
    document_to_dict,
)
from shared.errors import Exists, NotFound, OutOfDate
from validation import payloads

STAMP = "2025-01-01T00:00:00.000Z"


def _private(name, code="", mdate=STAMP):
    return document_to_dict(
        PrivateDocument(name=name, code=code, cdate=STAMP, mdate=mdate)
    )


def _permanent(name, path):
    return document_to_dict(
        PermanentDocument(
            name=name,
            code="",
            cdate=STAMP,
            mdate=STAMP,
            description="A permanent document used by the tests here",
            path=path,
            tags=[],
        )
    )


def _update_payload(**overrides):
    raw = {"id": "doc-1", "mdate": STAMP, "name": "My doc", "code": "new code"}
    raw.update(overrides)
    return payloads.parse(payloads.UpdateDocumentPayload, raw, "UpdateDocumentPayload")


class UpdateDocumentCodeTest(unittest.TestCase):

    def setUp(self):
        self.db = InMemoryDbClient()
        self.db.documents["user-1"] = {"doc-1": _private("My doc", code="old")}

    def test_replaces_code_and_bumps_mdate(self):
        payload = payloads.UpdateDocumentCodePayload(
            id="doc-1", mdate=STAMP, code="new"
        )

        result = update.update_document_code(self.db, "user-1", payload)

        stored = self.db.documents["user-1"]["doc-1"]
        self.assertEqual(stored["code"], "new")
        self.assertEqual(stored["mdate"], result["mdate"])
        self.assertGreater(result["mdate"], STAMP)
        self.assertEqual(stored["cdate"], STAMP)

    def test_mdate_strictly_increases_across_edits(self):
        mdate = STAMP
        seen = []
        for i in range(5):
            payload = payloads.UpdateDocumentCodePayload(
                id="doc-1", mdate=mdate, code=f"v{i}"
            )
            mdate = update.update_document_code(self.db, "user-1", payload)["mdate"]
            seen.append(mdate)
        self.assertEqual(seen, sorted(set(seen)))

    def test_stale_mdate_is_rejected_without_write(self):
        payload = payloads.UpdateDocumentCodePayload(
            id="doc-1", mdate="2024-12-31T23:59:59.999Z", code="new"
        )
        before = dict(self.db.documents["user-1"]["doc-1"])

        with self.assertRaises(OutOfDate):
            update.update_document_code(self.db, "user-1", payload)

        self.assertEqual(self.db.documents["user-1"]["doc-1"], before)

    def test_missing_collection_and_document(self):
        payload = payloads.UpdateDocumentCodePayload(
            id="doc-1", mdate=STAMP, code="new"
        )
        with self.assertRaisesRegex(NotFound, "Documents collection not found"):
            update.update_document_code(self.db, "nobody", payload)

        payload = payloads.UpdateDocumentCodePayload(
            id="missing", mdate=STAMP, code="new"
        )
        with self.assertRaisesRegex(NotFound, "Document not found"):
            update.update_document_code(self.db, "user-1", payload)


class UpdateDocumentNameTest(unittest.TestCase):

    def setUp(self):
        self.db = InMemoryDbClient()
        self.db.documents["user-1"] = {
            "doc-1": _private("My doc", code="keep me"),
            "doc-2": _private("Other doc"),
        }

    def _rename(self, name, document_id="doc-1"):
        payload = payloads.UpdateDocumentNamePayload(
            id=document_id, mdate=STAMP, name=name
        )
        return update.update_document_name(self.db, "user-1", payload)

    def test_renames_without_touching_code(self):
        self._rename("Renamed doc")

        stored = self.db.documents["user-1"]["doc-1"]
        self.assertEqual(stored["name"], "Renamed doc")
        self.assertEqual(stored["code"], "keep me")

    def test_keeping_own_name_is_allowed(self):
        self._rename("My doc")
        self.assertEqual(self.db.documents["user-1"]["doc-1"]["name"], "My doc")

    def test_name_of_sibling_is_rejected(self):
        with self.assertRaises(update.ScopedNameExists) as ctx:
            self._rename("Other doc")
        self.assertEqual(
            ctx.exception.message, "Document with provided name already exist"
        )
        self.assertEqual(self.db.documents["user-1"]["doc-1"]["name"], "My doc")

    def test_name_of_any_permanent_document_is_rejected(self):
        self.db.documents["user-2"] = {"perm-1": _permanent("Shared name", "shared-name")}

        with self.assertRaises(update.GlobalNameExists):
            self._rename("Shared name")

    def test_permanent_rename_updates_path(self):
        self.db.documents["user-1"]["doc-1"] = _permanent("Old title", "old-title")

        self._rename("Brand New Title")

        stored = self.db.documents["user-1"]["doc-1"]
        self.assertEqual(stored["path"], "brand-new-title")
        self.assertEqual(stored["visibility"], "permanent")


class UpdateDocumentTest(unittest.TestCase):

    def setUp(self):
        self.db = InMemoryDbClient()
        self.db.documents["user-1"] = {
            "doc-1": _private("My doc"),
            "doc-2": _private("Sibling doc"),
        }

    def test_updates_private_document(self):
        result = update.update_document(
            self.db, "user-1", _update_payload(visibility="private")
        )

        self.assertEqual(result["id"], "doc-1")
        self.assertEqual(result["code"], "new code")
        self.assertEqual(result["cdate"], STAMP)
        self.assertGreater(result["mdate"], STAMP)
        self.assertEqual(self.db.documents["user-1"]["doc-1"]["code"], "new code")

    def test_publishes_document(self):
        result = update.update_document(
            self.db, "user-1", _update_payload(visibility="public")
        )
        self.assertEqual(result["visibility"], "public")
        self.assertNotIn("path", self.db.documents["user-1"]["doc-1"])

    def test_makes_document_permanent(self):
        result = update.update_document(
            self.db,
            "user-1",
            _update_payload(
                visibility="permanent",
                name="Intro to   Python",
                description="Everything you need to know to get started with Python",
                tags=["Python", "intro"],
            ),
        )

        self.assertEqual(result["name"], "Intro to Python")
        self.assertEqual(result["path"], "intro-to-python")
        self.assertEqual(result["tags"], ["python", "intro"])
        stored = self.db.documents["user-1"]["doc-1"]
        self.assertEqual(stored["visibility"], "permanent")
        self.assertEqual(stored["description"], result["description"])

    def test_back_to_private_drops_permanent_fields(self):
        self.db.documents["user-1"]["doc-1"] = _permanent("My doc", "my-doc")

        update.update_document(self.db, "user-1", _update_payload(visibility="private"))

        stored = self.db.documents["user-1"]["doc-1"]
        self.assertEqual(stored["visibility"], "private")
        self.assertNotIn("path", stored)
        self.assertNotIn("description", stored)

    def test_scoped_name_clash(self):
        with self.assertRaises(update.ScopedNameExists):
            update.update_document(
                self.db, "user-1", _update_payload(visibility="public", name="Sibling doc")
            )

    def test_permanent_sibling_name_only_clashes_globally(self):
        self.db.documents["user-1"]["doc-2"] = _permanent("Sibling doc", "sibling-doc")

        with self.assertRaises(update.GlobalNameExists) as ctx:
            update.update_document(
                self.db,
                "user-1",
                _update_payload(
                    visibility="permanent",
                    name="Sibling doc",
                    description="A description that is comfortably long enough to pass validation",
                ),
            )
        self.assertEqual(
            ctx.exception.message,
            "Document with provided name already exists, please change name",
        )

    def test_global_clash_with_other_users_permanent_document(self):
        self.db.documents["user-2"] = {"perm-9": _permanent("Taken", "taken")}

        with self.assertRaises(Exists):
            update.update_document(
                self.db, "user-1", _update_payload(visibility="private", name="Taken")
            )
        self.assertEqual(self.db.documents["user-1"]["doc-1"]["name"], "My doc")

    def test_out_of_date_wins_over_name_clash(self):
        self.db.documents["user-2"] = {"perm-9": _permanent("Taken", "taken")}

        with patch.object(update, "permanent_name_taken") as mock_scan:
            with self.assertRaises(OutOfDate):
                update.update_document(
                    self.db,
                    "user-1",
                    _update_payload(
                        visibility="private",
                        name="Taken",
                        mdate="2024-06-01T00:00:00.000Z",
                    ),
                )
            mock_scan.assert_not_called()

    def test_public_document_of_other_user_does_not_clash(self):
        self.db.documents["user-2"] = {
            "pub-1": document_to_dict(
                PublicDocument(name="Popular", code="", cdate=STAMP, mdate=STAMP)
            )
        }

        result = update.update_document(
            self.db, "user-1", _update_payload(visibility="public", name="Popular")
        )
        self.assertEqual(result["name"], "Popular")


class PermanentNameTakenTest(unittest.TestCase):

    def test_ignores_the_edited_document(self):
        db = InMemoryDbClient()
        db.documents["user-1"] = {"perm-1": _permanent("Taken", "taken")}

        self.assertFalse(update.permanent_name_taken(db, "Taken", "perm-1"))
        self.assertTrue(update.permanent_name_taken(db, "Taken", "other"))
        self.assertFalse(update.permanent_name_taken(db, "Free", "other"))


if __name__ == "__main__":
    unittest.main()
