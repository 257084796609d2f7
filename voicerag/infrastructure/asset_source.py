# voicerag/infrastructure/asset_source.py

import asyncio
import logging
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote

import httpx

from voicerag.domain.interfaces import DocumentSourcePort


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0

# Same unreserved set as JavaScript's encodeURIComponent.
_URI_COMPONENT_SAFE = "!~*'()"


def encode_file_name(file_name: str) -> str:
    return quote(file_name, safe=_URI_COMPONENT_SAFE)


class HttpAssetSource(DocumentSourcePort):
    """
    Discovers documents through a JSON manifest (an array of file names) and
    fetches each one from `<assets_base_url>/<percent-encoded name>`.

    Anything other than a 2xx JSON array degrades to "no documents"; a file
    that cannot be fetched is skipped by returning None.
    """

    def __init__(
        self,
        manifest_url: str,
        assets_base_url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._manifest_url = manifest_url
        self._assets_base_url = assets_base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def asset_url(self, file_name: str) -> str:
        return f"{self._assets_base_url}/{encode_file_name(file_name)}"

    async def discover(self) -> List[str]:
        try:
            async with self._client() as client:
                response = await client.get(self._manifest_url)
            if not response.is_success:
                logger.warning(
                    "[HttpAssetSource] Could not load manifest from %s (HTTP %d)",
                    self._manifest_url, response.status_code,
                )
                return []
            file_list = response.json()
        except (httpx.HTTPError, ValueError) as error:
            logger.warning("[HttpAssetSource] Error loading manifest: %s", error)
            return []

        if not isinstance(file_list, list):
            logger.warning("[HttpAssetSource] Manifest is not an array; ignoring it.")
            return []

        names = [name for name in file_list if isinstance(name, str) and name]
        logger.info("[HttpAssetSource] Discovered %d file(s) in manifest.", len(names))
        return names

    async def fetch(self, file_name: str) -> Optional[bytes]:
        url = self.asset_url(file_name)
        try:
            async with self._client() as client:
                response = await client.get(url)
        except httpx.HTTPError as error:
            logger.warning("[HttpAssetSource] ⚠ Failed to fetch '%s': %s", file_name, error)
            return None

        if not response.is_success:
            logger.warning(
                "[HttpAssetSource] ⚠ Skipping '%s': HTTP %d", file_name, response.status_code
            )
            return None

        logger.info("[HttpAssetSource] Fetched '%s' (%d bytes)", file_name, len(response.content))
        return response.content

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)


class DirectorySource(DocumentSourcePort):
    """
    Local-folder source. Lists regular, non-hidden files directly inside the
    directory; this listing is also what the HTTP manifest endpoint serves.
    """

    def __init__(self, directory: str):
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def list_files(self) -> List[str]:
        """Raises OSError when the directory cannot be read."""
        return sorted(
            entry.name
            for entry in self._directory.iterdir()
            if not entry.name.startswith(".") and entry.is_file()
        )

    def resolve(self, file_name: str) -> Optional[Path]:
        """Path of a listed file, or None for anything outside the folder."""
        if not file_name or Path(file_name).name != file_name or file_name.startswith("."):
            return None
        path = self._directory / file_name
        return path if path.is_file() else None

    async def discover(self) -> List[str]:
        try:
            names = self.list_files()
        except OSError as error:
            logger.warning("[DirectorySource] Cannot read '%s': %s", self._directory, error)
            return []

        logger.info("[DirectorySource] Discovered %d file(s) in '%s'.", len(names), self._directory)
        return names

    async def fetch(self, file_name: str) -> Optional[bytes]:
        path = self.resolve(file_name)
        if path is None:
            logger.warning("[DirectorySource] ⚠ '%s' not found in '%s'.", file_name, self._directory)
            return None
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as error:
            logger.warning("[DirectorySource] ⚠ Failed to read '%s': %s", file_name, error)
            return None
