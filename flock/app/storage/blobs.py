# flock/app/storage/blobs.py
"""
Image storage. Two backends share the BlobStore interface:

- HttpBlobStore: a cloud bucket reached through its XML/REST API
  (PUT and DELETE on BUCKET_URL + key, public reads on SERVING_URL + key)
- LocalBlobStore: files under MEDIA_ROOT, served by the app at MEDIA_URL

Both are blocking, callers run them in a worker thread.
"""
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import requests

from flock.app.core.errors import StorageError

logger = logging.getLogger(__name__)


class BlobStore(ABC):

    def __init__(self, serving_url: str):
        self.serving_url = serving_url if serving_url.endswith("/") else serving_url + "/"

    @abstractmethod
    def put(self, data: bytes, content_type: str, key: str) -> str:
        """Store the bytes and return their public URL."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove an object. A missing object is not an error."""

    def url_for(self, key: str) -> str:
        return self.serving_url + key

    def key_for(self, url: Optional[str]) -> Optional[str]:
        """The key behind a URL this store served, None for foreign URLs."""
        if not url or not url.startswith(self.serving_url):
            return None
        key = url[len(self.serving_url):]
        if not key or "/" in key or key in (".", ".."):
            return None
        return key


class HttpBlobStore(BlobStore):

    def __init__(self, bucket_url: str, serving_url: str, timeout: float = 5.0,
                 session: Optional[requests.Session] = None):
        super().__init__(serving_url or bucket_url)
        self.bucket_url = bucket_url if bucket_url.endswith("/") else bucket_url + "/"
        self.timeout = timeout
        self.session = session or requests.Session()

    def put(self, data: bytes, content_type: str, key: str) -> str:
        try:
            response = self.session.put(
                self.bucket_url + key,
                data=data,
                headers={"Content-Type": content_type},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Bucket PUT %s failed: %s", key, e)
            raise StorageError(502, "cannotSaveImage", str(e)) from e

        if not 200 <= response.status_code < 300:
            raise StorageError(response.status_code, "cannotSaveImage", response.text)
        logger.info("Stored %s (%d bytes)", key, len(data))
        return self.url_for(key)

    def delete(self, key: str) -> None:
        try:
            response = self.session.delete(self.bucket_url + key, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Bucket DELETE %s failed: %s", key, e)
            raise StorageError(502, "cannotDeleteImage", str(e)) from e

        if response.status_code == 404:
            return
        if response.status_code >= 400:
            raise StorageError(response.status_code, "cannotDeleteImage", response.text)
        logger.info("Deleted %s", key)


class LocalBlobStore(BlobStore):

    def __init__(self, root: str, serving_url: str):
        super().__init__(serving_url)
        self.root = Path(root)

    def put(self, data: bytes, content_type: str, key: str) -> str:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            (self.root / key).write_bytes(data)
        except OSError as e:
            logger.error("Cannot write %s: %s", key, e)
            raise StorageError(500, "cannotSaveImage", "The image could not be stored") from e
        return self.url_for(key)

    def delete(self, key: str) -> None:
        try:
            (self.root / key).unlink(missing_ok=True)
        except OSError as e:
            logger.error("Cannot delete %s: %s", key, e)
            raise StorageError(500, "cannotDeleteImage", "The image could not be deleted") from e
