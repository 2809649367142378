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

# Cloud functions for the documents backend - documents, user profiles,
# image uploads and database backups.
#
# This file containing Python cloud functions must be named main.py.
# See https://cloud.google.com/run/docs/write-functions#python for more info.

# Standard library imports
import functools
from typing import Any, Callable

# Third-party library imports
from firebase_admin import initialize_app
from firebase_functions import https_fn, logger, options, scheduler_fn

# Local application imports
from backend.config import Settings, get_settings
from backend.dependencies import get_db_client, get_storage_client
from backups import service as backups
from backups.client import FirestoreBackupClient
from documents import service as documents
from documents import update
from images import service as images
from profiles import service as profiles
from shared.errors import DomainError, ErrorKind, Unauthenticated
from shared.json_utils import convert_keys
from validation import payloads
from validation.payloads import parse

AUTO_BACKUP_SCHEDULE = "every sunday 23:59"

ERROR_CODES = {
    ErrorKind.UNAUTHENTICATED: https_fn.FunctionsErrorCode.UNAUTHENTICATED,
    ErrorKind.INVALID_ARGUMENT: https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
    ErrorKind.NOT_FOUND: https_fn.FunctionsErrorCode.NOT_FOUND,
    ErrorKind.OUT_OF_DATE: https_fn.FunctionsErrorCode.FAILED_PRECONDITION,
    ErrorKind.EXISTS: https_fn.FunctionsErrorCode.ALREADY_EXISTS,
    ErrorKind.INTERNAL: https_fn.FunctionsErrorCode.INTERNAL,
}

initialize_app()


def _handles_errors(func: Callable[[https_fn.CallableRequest], Any]):
    """
    Reports domain errors to the client as HttpsError with the matching code
    and a machine-readable `kind` in the details. Anything unexpected is
    logged and reported as INTERNAL.
    """

    @functools.wraps(func)
    def wrapper(req: https_fn.CallableRequest):
        try:
            return func(req)
        except DomainError as e:
            if e.kind == ErrorKind.INTERNAL:
                logger.error(f"{func.__name__} failed: {e.message}")
            raise https_fn.HttpsError(
                ERROR_CODES[e.kind], e.message, {"kind": e.kind.value}
            ) from e
        except https_fn.HttpsError:
            raise
        except Exception as e:
            logger.error(f"Unexpected error in {func.__name__}: {e}")
            raise https_fn.HttpsError(
                https_fn.FunctionsErrorCode.INTERNAL,
                "Server error",
                {"kind": ErrorKind.INTERNAL.value},
            ) from e

    return wrapper


def _authorize(req: https_fn.CallableRequest) -> str:
    """Returns the caller's uid. Raises Unauthenticated for anonymous calls."""
    if req.auth is None or not req.auth.uid:
        raise Unauthenticated()
    return req.auth.uid


def _result(value: Any) -> Any:
    return convert_keys(value, "snake_to_camel")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
@_handles_errors
def create_document(req: https_fn.CallableRequest) -> dict:
    uid = _authorize(req)
    payload = parse(payloads.CreateDocumentPayload, req.data)
    return _result(documents.create_document(get_db_client(), uid, payload))


@https_fn.on_call(memory=options.MemoryOption.MB_256)
@_handles_errors
def update_doc(req: https_fn.CallableRequest) -> dict:
    """
    Rewrites name, code and visibility of one of the caller's documents.

    Args:
        req (https_fn.CallableRequest): The request, containing id, mdate, name,
            code and visibility (plus description and tags for permanent).

    Returns:
        The stored document with its id.
    """
    uid = _authorize(req)
    payload = parse(
        payloads.UpdateDocumentPayload, req.data, "UpdateDocumentPayload"
    )
    return _result(update.update_document(get_db_client(), uid, payload))


@https_fn.on_call(memory=options.MemoryOption.MB_256)
@_handles_errors
def update_document_code(req: https_fn.CallableRequest) -> dict:
    uid = _authorize(req)
    payload = parse(payloads.UpdateDocumentCodePayload, req.data)
    return _result(update.update_document_code(get_db_client(), uid, payload))


@https_fn.on_call(memory=options.MemoryOption.MB_256)
@_handles_errors
def update_document_name(req: https_fn.CallableRequest) -> dict:
    uid = _authorize(req)
    payload = parse(payloads.UpdateDocumentNamePayload, req.data)
    return _result(update.update_document_name(get_db_client(), uid, payload))


@https_fn.on_call(memory=options.MemoryOption.MB_256)
@_handles_errors
def delete_document(req: https_fn.CallableRequest) -> dict:
    uid = _authorize(req)
    payload = parse(payloads.DocumentIdPayload, req.data)
    return _result(documents.delete_document(get_db_client(), uid, payload))


@https_fn.on_call(memory=options.MemoryOption.MB_256)
@_handles_errors
def rate_document(req: https_fn.CallableRequest) -> dict:
    uid = _authorize(req)
    payload = parse(payloads.RateDocumentPayload, req.data)
    return _result(documents.rate_document(get_db_client(), uid, payload))


@https_fn.on_call(memory=options.MemoryOption.MB_256)
@_handles_errors
def get_your_documents(req: https_fn.CallableRequest) -> list:
    uid = _authorize(req)
    return _result(documents.get_your_documents(get_db_client(), uid))


@https_fn.on_call(memory=options.MemoryOption.MB_512)
@_handles_errors
def get_permanent_documents(req: https_fn.CallableRequest) -> list:
    """Lists every permanent document with its author and rating. No auth required."""
    return _result(documents.get_permanent_documents(get_db_client()))


@https_fn.on_call(memory=options.MemoryOption.MB_256)
@_handles_errors
def get_accessible_document(req: https_fn.CallableRequest) -> dict:
    payload = parse(payloads.DocumentIdPayload, req.data)
    return _result(documents.get_accessible_document(get_db_client(), payload))


@https_fn.on_call(memory=options.MemoryOption.MB_512)
@_handles_errors
def upload_image(req: https_fn.CallableRequest) -> dict:
    _authorize(req)
    payload = parse(payloads.UploadImagePayload, req.data)
    return _result(
        images.upload_image(
            get_storage_client(), payload, get_settings().image_max_size_mb
        )
    )


@https_fn.on_call(memory=options.MemoryOption.MB_256)
@_handles_errors
def get_your_user_profile(req: https_fn.CallableRequest) -> dict | None:
    uid = _authorize(req)
    return profiles.get_your_user_profile(get_db_client(), uid)


@https_fn.on_call(memory=options.MemoryOption.MB_512)
@_handles_errors
def update_your_user_profile(req: https_fn.CallableRequest) -> dict:
    """
    Creates or updates the caller's profile, re-rendering the avatar when a
    new image is sent.
    """
    uid = _authorize(req)
    payload = parse(payloads.UserProfilePayload, req.data)
    return profiles.update_your_user_profile(
        get_db_client(),
        get_storage_client(),
        uid,
        payload,
        get_settings().image_max_size_mb,
    )


def _backup_client(settings: Settings) -> FirestoreBackupClient:
    return FirestoreBackupClient(project_id=settings.project_id)


# Backup endpoints are guarded by BACKUP_TOKEN instead of a signed-in user.
# Settings are rebuilt per call so a rotated token applies immediately.


@https_fn.on_call(memory=options.MemoryOption.MB_256)
@_handles_errors
def create_backup(req: https_fn.CallableRequest) -> dict:
    payload = parse(payloads.CreateBackupPayload, req.data)
    settings = Settings()
    return _result(backups.create_backup(_backup_client(settings), settings, payload))


@https_fn.on_call(memory=options.MemoryOption.MB_256)
@_handles_errors
def use_backup(req: https_fn.CallableRequest) -> dict:
    payload = parse(payloads.UseBackupPayload, req.data)
    settings = Settings()
    return _result(backups.use_backup(_backup_client(settings), settings, payload))


def _run_scheduled_backup(settings: Settings) -> dict | None:
    """Starts the weekly backup. Returns None when the run is skipped."""
    if settings.is_dev_project:
        logger.info(f"Skipping scheduled backup for dev project {settings.project_id}")
        return None
    if not settings.backup_token:
        logger.error("Scheduled backup skipped: BACKUP_TOKEN is not configured")
        return None

    result = backups.create_backup(
        _backup_client(settings),
        settings,
        payloads.CreateBackupPayload(token=settings.backup_token),
    )
    logger.info(f"Scheduled backup started: {result['backup_id']}")
    return result


@scheduler_fn.on_schedule(schedule=AUTO_BACKUP_SCHEDULE)
def auto_create_backup(event: scheduler_fn.ScheduledEvent) -> None:
    """Weekly backup of the production database."""
    _run_scheduled_backup(Settings())
