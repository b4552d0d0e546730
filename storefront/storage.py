# storefront/storage.py
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# flat object keys only: no sub-folders, no traversal
_SAFE_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class BucketStorage:
    """Directory-backed file buckets served under ``<public_base_url>/storage``."""

    def __init__(self, root: Path | str, public_base_url: str):
        self.root = Path(root).resolve()
        self.public_base_url = (public_base_url or "").rstrip("/")

    def _path(self, bucket: str, path: str) -> Path:
        if not _SAFE_NAME_RE.match(bucket or "") or not _SAFE_NAME_RE.match(path or ""):
            raise ValueError(f"Invalid storage path '{bucket}/{path}'")
        return self.root / bucket / path

    def upload(
        self,
        bucket: str,
        path: str,
        content: bytes,
        cache_control: str = "3600",
        upsert: bool = True,
    ) -> Optional[str]:
        """Returns an error message, or None on success."""
        try:
            target = self._path(bucket, path)
            if target.exists() and not upsert:
                return f"The resource '{path}' already exists"
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except (OSError, ValueError) as e:
            logger.warning("upload to %s/%s failed: %s", bucket, path, e)
            return str(e)

        logger.info("uploaded %s/%s (%d bytes, cache-control=%s)", bucket, path, len(content), cache_control)
        return None

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_base_url}/storage/{bucket}/{path}"
