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

import logging
import uuid
from typing import Optional

from backend.db import DbClient
from backend.storage import StorageClient
from profiles import avatars
from shared.errors import Exists
from shared.timestamps import next_stamp, now_stamp
from shared.user_profile import (
    Avatar,
    UserProfile,
    parse_user_profile,
    user_profile_to_dict,
)
from validation.payloads import (
    NoopAvatarPayload,
    RemoveAvatarPayload,
    UpdateAvatarPayload,
    UserProfilePayload,
)

logger = logging.getLogger(__name__)


def check_display_name_taken(
    db: DbClient, uid: str, display_name: Optional[str]
) -> None:
    """
    Raises Exists when another user already uses `display_name`.

    Reads every profile; a null display name is never taken.
    """
    if display_name is None:
        return
    for other_uid, profile in db.list_profiles().items():
        if other_uid == uid:
            continue
        if (profile or {}).get("displayName") == display_name:
            raise Exists("This display name is already taken by other user")


def get_your_user_profile(db: DbClient, uid: str) -> Optional[dict]:
    profile = db.get_profile(uid)
    if profile is None:
        return None
    return user_profile_to_dict(parse_user_profile(profile))


def _next_avatar(
    storage: StorageClient,
    uid: str,
    payload: UserProfilePayload,
    current: Optional[Avatar],
    max_size_mb: float,
) -> Optional[Avatar]:
    action = payload.avatar
    if isinstance(action, NoopAvatarPayload):
        return current
    if isinstance(action, RemoveAvatarPayload):
        if current is not None:
            avatars.remove_avatars(storage, uid)
        return None
    if isinstance(action, UpdateAvatarPayload):
        return avatars.rescale_and_upload_avatars(
            storage, uid, action.data, max_size_mb
        )
    raise TypeError(f"Unknown avatar action: {action!r}")


def update_your_user_profile(
    db: DbClient,
    storage: StorageClient,
    uid: str,
    payload: UserProfilePayload,
    max_size_mb: float,
) -> dict:
    """
    Creates the caller's profile on first use, otherwise replaces its editable
    fields. `id` and `cdate` never change after creation.
    """
    check_display_name_taken(db, uid, payload.display_name)

    stored = db.get_profile(uid)

    if stored is None:
        cdate = now_stamp()
        profile = UserProfile(
            id=str(uuid.uuid4()),
            cdate=cdate,
            mdate=cdate,
            avatar=_next_avatar(storage, uid, payload, None, max_size_mb),
            display_name=payload.display_name,
            bio=payload.bio,
            blog_url=payload.blog_url,
            fb_url=payload.fb_url,
            github_url=payload.github_url,
            twitter_url=payload.twitter_url,
            linked_in_url=payload.linked_in_url,
        )
        logger.info("Creating profile for user %s", uid)
    else:
        current = parse_user_profile(stored)
        profile = UserProfile(
            id=current.id,
            cdate=current.cdate,
            mdate=next_stamp(current.mdate),
            avatar=_next_avatar(storage, uid, payload, current.avatar, max_size_mb),
            display_name=payload.display_name,
            bio=payload.bio,
            blog_url=payload.blog_url,
            fb_url=payload.fb_url,
            github_url=payload.github_url,
            twitter_url=payload.twitter_url,
            linked_in_url=payload.linked_in_url,
        )

    profile_dict = user_profile_to_dict(profile)
    db.set_profile(uid, profile_dict)
    return profile_dict
