# flock/app/storage/images.py
"""
Checks that a URL really points at an image.

A regex on the URL is not enough: the resource must exist and be served
with an image/* Content-Type. Network failures count as "not an image".
"""
import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)


class ImageUrlValidator:

    def __init__(self, timeout: float = 5.0, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def __call__(self, url: Optional[str]) -> bool:
        if not url or not url.lower().startswith(("http://", "https://")):
            return False

        try:
            response = self.session.head(url, allow_redirects=True, timeout=self.timeout)
            if response.status_code == 405:
                # Some servers refuse HEAD, fetch the headers with a streamed GET
                response = self.session.get(url, stream=True, allow_redirects=True, timeout=self.timeout)
                response.close()
        except requests.RequestException as e:
            logger.info("Image check failed for %s: %s", url, e)
            return False

        if response.status_code >= 400:
            return False
        return response.headers.get("Content-Type", "").lower().startswith("image/")
