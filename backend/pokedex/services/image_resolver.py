"""
Pokedex Backend — Image Resolver
=================================

What:  Stores a record's image at a deterministic path keyed by its id.
Why:   Creation may come with an uploaded file, a remote URL or a local path.
       Whatever the source, the record's `image` field is the same public
       URI: <public_base_url>/assets/pokemons/<id>.png
How:   Best-effort. Sources are tried in priority order (upload, URL, path)
       and every failure is turned into an ImageResult instead of an
       exception. Record creation never fails because of an image.

Directory Structure:
    assets/
    └── pokemons/
        ├── 1.png
        ├── 2.png
        └── ...

Accepted behavior:
    A record can point at an asset that does not exist (download failed).
    That is reported as ImageOutcome.FAILED and logged; it is not corrected.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

import aiofiles
import httpx

from pokedex.config import settings

logger = logging.getLogger(__name__)

ASSET_SUBDIR = "pokemons"


class ImageOutcome(str, Enum):
    STORED = "stored"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class ImageSource:
    """
    Where a new record's image comes from. At most one source is used:
    upload bytes first, then a remote URL, then a local path.
    """
    upload: Optional[bytes] = None
    remote_url: Optional[str] = None
    local_path: Optional[str] = None

    @classmethod
    def from_request(
        cls, reference: Optional[str], upload: Optional[bytes] = None
    ) -> "ImageSource":
        """
        Build a source from the create body's `image` string and the
        optional multipart upload. A reference starting with "http" is a
        URL; anything else is treated as a local file path.
        """
        if reference and reference.startswith("http"):
            return cls(upload=upload, remote_url=reference)
        return cls(upload=upload, local_path=reference or None)

    @property
    def kind(self) -> str:
        if self.upload:
            return "upload"
        if self.remote_url:
            return "url"
        if self.local_path:
            return "path"
        return "none"


@dataclass(frozen=True)
class ImageResult:
    outcome: ImageOutcome
    source: str
    path: Optional[str] = None
    detail: Optional[str] = None


class ImageResolver:
    """
    Resolves image sources into files under the asset directory.

    Args:
        assets_root: Directory served under /assets (default settings.assets_root)
        public_base_url: Base of the URI stored in `image`
        fetch_timeout: Seconds before a remote download is abandoned
        user_agent: Sent with remote downloads
    """

    def __init__(
        self,
        assets_root: Optional[str] = None,
        public_base_url: Optional[str] = None,
        fetch_timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
    ):
        self.assets_root = Path(assets_root or settings.assets_root).resolve()
        self.public_base_url = (public_base_url or settings.public_base_url).rstrip("/")
        self.fetch_timeout = fetch_timeout or settings.image_fetch_timeout
        self.user_agent = user_agent or settings.image_fetch_user_agent

    @property
    def asset_dir(self) -> Path:
        return self.assets_root / ASSET_SUBDIR

    def asset_path(self, record_id: int) -> Path:
        return self.asset_dir / f"{record_id}.png"

    def public_url(self, record_id: int) -> str:
        """Deterministic URI stored on the record, independent of file presence."""
        return f"{self.public_base_url}/assets/{ASSET_SUBDIR}/{record_id}.png"

    def ensure_asset_dir(self) -> None:
        """Create the asset directory and parents. Safe to race."""
        self.asset_dir.mkdir(parents=True, exist_ok=True)

    async def resolve(self, record_id: int, source: ImageSource) -> ImageResult:
        """
        Store the image for `record_id` from the first usable source.

        Returns:
            ImageResult: STORED with the file path, SKIPPED when there was
            nothing to store, FAILED with a reason otherwise. Never raises.
        """
        kind = source.kind
        target = self.asset_path(record_id)

        try:
            self.ensure_asset_dir()
        except OSError as e:
            return self._failed(record_id, kind, f"asset directory unavailable: {e}")

        if source.upload:
            content: Optional[bytes] = source.upload
        elif source.remote_url:
            try:
                content = await self._download(source.remote_url)
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                return self._failed(record_id, kind, f"download failed: {type(e).__name__}: {e}")
            if content is None:
                return self._failed(record_id, kind, "download returned a non-2xx status")
        elif source.local_path:
            local = Path(source.local_path)
            if not local.is_file():
                logger.info("Image path for pokemon %d does not exist; skipping", record_id)
                return ImageResult(outcome=ImageOutcome.SKIPPED, source=kind)
            try:
                async with aiofiles.open(local, "rb") as f:
                    content = await f.read()
            except OSError as e:
                return self._failed(record_id, kind, f"copy failed: {e}")
        else:
            return ImageResult(outcome=ImageOutcome.SKIPPED, source=kind)

        try:
            async with aiofiles.open(target, "wb") as f:
                await f.write(content)
        except OSError as e:
            return self._failed(record_id, kind, f"write failed: {e}")

        logger.info(
            "Image stored for pokemon %d from %s (%d bytes)", record_id, kind, len(content)
        )
        return ImageResult(outcome=ImageOutcome.STORED, source=kind, path=str(target))

    async def _download(self, url: str) -> Optional[bytes]:
        """GET `url`; body on 2xx, None on any other status."""
        async with httpx.AsyncClient(
            timeout=self.fetch_timeout,
            follow_redirects=True,
            headers={"User-Agent": self.user_agent},
        ) as client:
            response = await client.get(url)
        if not response.is_success:
            logger.debug("Image download %s answered %d", url, response.status_code)
            return None
        return response.content

    def _failed(self, record_id: int, kind: str, detail: str) -> ImageResult:
        logger.warning("Image for pokemon %d not stored (%s): %s", record_id, kind, detail)
        return ImageResult(outcome=ImageOutcome.FAILED, source=kind, detail=detail)
