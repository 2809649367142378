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

from datetime import datetime, timedelta, timezone

STAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def to_stamp(value: datetime) -> str:
    """Formats a datetime as an ISO-8601 UTC stamp with millisecond precision."""
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def from_stamp(stamp: str) -> datetime:
    return datetime.strptime(stamp, STAMP_FORMAT).replace(tzinfo=timezone.utc)


def now_stamp() -> str:
    return to_stamp(datetime.now(timezone.utc))


def next_stamp(previous: str) -> str:
    """
    Returns the current stamp, moved forward so it is strictly later than
    `previous`. Two writes inside the same millisecond still produce
    distinct, ordered modification dates.
    """
    now = datetime.now(timezone.utc)
    now = now.replace(microsecond=now.microsecond // 1000 * 1000)
    floor = from_stamp(previous) + timedelta(milliseconds=1)
    return to_stamp(max(now, floor))
