"""
Storage abstraction for Firebase Storage, Tencent COS (S3-compatible) and
in-memory testing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol
from urllib.parse import quote

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError
from firebase_admin import storage


class StorageClient(Protocol):
    """Defines the operations the functions need from object storage."""

    def bucket_exists(self) -> bool:
        ...

    def upload_bytes(
        self, path: str, data: bytes, content_type: str, public: bool = False
    ) -> None:
        ...

    def delete(self, path: str) -> None:
        ...

    def public_url(self, path: str) -> str:
        ...


@dataclass
class InMemoryStorageClient:
    """Test double for storage interactions."""

    bucket_name: str = "test-bucket"
    exists: bool = True
    stored_objects: dict = None

    def __post_init__(self):
        if self.stored_objects is None:
            self.stored_objects = {}

    def bucket_exists(self) -> bool:
        return self.exists

    def upload_bytes(
        self, path: str, data: bytes, content_type: str, public: bool = False
    ) -> None:
        self.stored_objects[path] = {
            "data": data,
            "content_type": content_type,
            "public": public,
        }

    def delete(self, path: str) -> None:
        if path not in self.stored_objects:
            raise FileNotFoundError(path)
        del self.stored_objects[path]

    def public_url(self, path: str) -> str:
        return firebase_download_url(self.bucket_name, path)


def firebase_download_url(bucket_name: str, path: str) -> str:
    return (
        f"https://firebasestorage.googleapis.com/v0/b/{bucket_name}/o/"
        f"{quote(path, safe='')}?alt=media"
    )


class FirebaseStorageClient:
    """Firebase (Google Cloud) Storage bucket of the initialized app."""

    def __init__(self, bucket_name: Optional[str] = None):
        self._bucket = storage.bucket(bucket_name)

    @property
    def bucket_name(self) -> str:
        return self._bucket.name

    def bucket_exists(self) -> bool:
        return self._bucket.exists()

    def upload_bytes(
        self, path: str, data: bytes, content_type: str, public: bool = False
    ) -> None:
        blob = self._bucket.blob(path)
        blob.upload_from_string(data, content_type=content_type)
        if public:
            blob.make_public()

    def delete(self, path: str) -> None:
        self._bucket.blob(path).delete()

    def public_url(self, path: str) -> str:
        return firebase_download_url(self._bucket.name, path)


@dataclass
class CosStorageClient:
    """
    S3-compatible storage client for Tencent COS.
    """

    bucket: str
    region: str
    endpoint: str
    access_key_id: str
    secret_access_key: str

    def __post_init__(self):
        # Use virtual-hosted style addressing to satisfy COS requirements.
        config = Config(
            s3={"addressing_style": "virtual"},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint,
            region_name=self.region,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            config=config,
        )

    def bucket_exists(self) -> bool:
        try:
            self._client.head_bucket(Bucket=self.bucket)
        except ClientError:
            return False
        return True

    def upload_bytes(
        self, path: str, data: bytes, content_type: str, public: bool = False
    ) -> None:
        extra = {"ACL": "public-read"} if public else {}
        self._client.put_object(
            Bucket=self.bucket,
            Key=path,
            Body=data,
            ContentType=content_type,
            **extra,
        )

    def delete(self, path: str) -> None:
        self._client.delete_object(Bucket=self.bucket, Key=path)

    def public_url(self, path: str) -> str:
        host = self.endpoint.split("://", 1)[-1].rstrip("/")
        return f"https://{self.bucket}.{host}/{quote(path)}"
