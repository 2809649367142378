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

from dataclasses import asdict, dataclass
from typing import Optional

from dacite import Config, DaciteError, from_dict

from shared.errors import corrupted_schema
from shared.json_utils import convert_keys


@dataclass
class AvatarVariant:
    src: str
    id: str
    w: int
    h: int
    ext: str


@dataclass
class Avatar:
    lg: AvatarVariant
    md: AvatarVariant
    sm: AvatarVariant
    tn: AvatarVariant


@dataclass
class UserProfile:
    """Stored in the users-profiles collection under the owner's uid."""

    id: str
    cdate: str
    mdate: str
    display_name: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[Avatar] = None
    blog_url: Optional[str] = None
    fb_url: Optional[str] = None
    github_url: Optional[str] = None
    twitter_url: Optional[str] = None
    linked_in_url: Optional[str] = None


def parse_user_profile(data: Optional[dict]) -> UserProfile:
    """
    Builds a UserProfile from its stored (camelCase) form.

    Raises:
        Internal: If the stored profile does not match the schema.
    """
    if not isinstance(data, dict):
        raise corrupted_schema("user profile")
    try:
        return from_dict(
            data_class=UserProfile,
            data=convert_keys(data, "camel_to_snake"),
            config=Config(strict=True),
        )
    except DaciteError as e:
        raise corrupted_schema("user profile") from e


def user_profile_to_dict(profile: UserProfile) -> dict:
    return convert_keys(asdict(profile), "snake_to_camel")
