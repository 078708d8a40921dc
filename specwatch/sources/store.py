"""On-disk snapshot of a provider's specification.

Layout under the cache directory::

    {cache_dir}/{provider}/{filename}            raw document as fetched
    {cache_dir}/{provider}/routes/{unit_id}      canonical bundled unit
"""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path

import structlog

_log = structlog.get_logger(component="sources.store")

ROUTES_DIR = "routes"


class RouteStore:
    """Reads and replaces one provider's cached snapshot."""

    def __init__(self, cache_dir: Path | str, provider: str) -> None:
        self._provider_dir = Path(cache_dir) / provider
        self._routes_dir = self._provider_dir / ROUTES_DIR

    @property
    def routes_dir(self) -> Path:
        return self._routes_dir

    def raw_path(self, filename: str) -> Path:
        return self._provider_dir / filename

    def has_snapshot(self, filename: str) -> bool:
        """True when a raw document from a previous run exists."""
        return self.raw_path(filename).is_file()

    async def read_raw(self, filename: str) -> str:
        return await asyncio.to_thread(self.raw_path(filename).read_text, encoding="utf-8")

    async def write_raw(self, filename: str, content: str) -> None:
        await asyncio.to_thread(self._write, self.raw_path(filename), content)

    async def read_routes(self) -> dict[str, str]:
        """Return ``{unit_id: content}`` for every stored unit."""
        return await asyncio.to_thread(self._read_routes)

    async def write_routes(self, units: dict[str, str]) -> None:
        """Replace the stored units with *units*."""
        await asyncio.to_thread(self._write_routes, units)
        _log.info("routes_written", routes=len(units), directory=str(self._routes_dir))

    def _read_routes(self) -> dict[str, str]:
        if not self._routes_dir.is_dir():
            return {}
        return {
            path.relative_to(self._routes_dir).as_posix(): path.read_text(encoding="utf-8")
            for path in sorted(self._routes_dir.rglob("*.json"))
        }

    def _write_routes(self, units: dict[str, str]) -> None:
        shutil.rmtree(self._routes_dir, ignore_errors=True)
        for unit_id, content in units.items():
            self._write(self._routes_dir / unit_id, content)

    @staticmethod
    def _write(path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
