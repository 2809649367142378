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

from enum import StrEnum


class ErrorKind(StrEnum):
    UNAUTHENTICATED = "unauthenticated"
    INVALID_ARGUMENT = "invalid-argument"
    NOT_FOUND = "not-found"
    OUT_OF_DATE = "out-of-date"
    EXISTS = "exists"
    INTERNAL = "internal"


class DomainError(Exception):
    """Base class for failures reported back to the caller."""

    kind: ErrorKind = ErrorKind.INTERNAL
    default_message: str = "Server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(DomainError):
    kind = ErrorKind.UNAUTHENTICATED
    default_message = "No permissions"


class InvalidArgument(DomainError, ValueError):
    kind = ErrorKind.INVALID_ARGUMENT
    default_message = "Invalid argument"


class NotFound(DomainError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Not found"


class OutOfDate(DomainError):
    kind = ErrorKind.OUT_OF_DATE
    default_message = (
        "You cannot edit this document. You've changed it on another device."
    )


class Exists(DomainError):
    kind = ErrorKind.EXISTS
    default_message = "Already exists"


class Internal(DomainError):
    kind = ErrorKind.INTERNAL


def corrupted_schema(name: str) -> Internal:
    """Stored data that no longer matches its schema is a server-side fault."""
    return Internal(f"Stored {name} has invalid schema")
