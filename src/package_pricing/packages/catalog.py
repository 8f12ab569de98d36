"""Package catalog lookups.

The pricing core only ever reads packages through :class:`PackageCatalog`.
Implementations translate their own failures into ``LookupFailure`` subclasses.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Iterable, Mapping, Optional, Protocol

import httpx

from package_pricing.packages.models import Package
from package_pricing.pricing.errors import CatalogUnavailable, PackageNotFound

if TYPE_CHECKING:  # pragma: no cover
    from package_pricing.config.settings import Settings

logger = logging.getLogger(__name__)


class PackageCatalog(Protocol):
    async def get(self, package_id: str, version: Optional[int] = None) -> Package:
        ...


class InMemoryPackageCatalog:
    """Keeps every version of every package; ``version=None`` returns the latest."""

    def __init__(self, packages: Iterable[Package] = (), *, source: Optional[Path] = None) -> None:
        self._packages: Dict[str, Dict[int, Package]] = {}
        self._source = source
        for package in packages:
            self.add(package)

    @property
    def source(self) -> Optional[Path]:
        return self._source

    def add(self, package: Package) -> None:
        self._packages.setdefault(package.package_id, {})[package.version] = package

    def package_ids(self) -> list[str]:
        return sorted(self._packages)

    async def get(self, package_id: str, version: Optional[int] = None) -> Package:
        versions = self._packages.get(package_id)
        if not versions:
            raise PackageNotFound(package_id, version)
        if version is None:
            return versions[max(versions)]
        try:
            return versions[version]
        except KeyError as exc:
            raise PackageNotFound(package_id, version) from exc


class JsonPackageCatalog(InMemoryPackageCatalog):
    """Catalog loaded from a JSON export (``{"packages": [...]}``)."""

    @classmethod
    def load(cls, path: Path) -> "JsonPackageCatalog":
        if not path.exists():
            raise FileNotFoundError(f"Package catalog not found at {path}")
        data = json.loads(path.read_text())
        entries = data.get("packages", []) if isinstance(data, dict) else data
        packages = Package.from_iterable(entries)
        logger.info("Loaded %s package records from %s", len(packages), path)
        return cls(packages, source=path)


class HttpPackageCatalog:
    """Reads packages from the internal packages endpoint."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        default_headers = {
            "Accept": "application/json",
            "User-Agent": "package-pricing/0.1.0",
        }
        if headers:
            default_headers.update(headers)
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers=default_headers,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpPackageCatalog":
        return self

    async def __aexit__(self, exc_type, exc, exc_tb) -> None:
        await self.aclose()

    async def get(self, package_id: str, version: Optional[int] = None) -> Package:
        params = {"version": str(version)} if version is not None else None
        logger.debug("Fetching package %s (version=%s)", package_id, version)
        try:
            response = await self._client.get(f"/packages/{package_id}", params=params)
        except httpx.HTTPError as exc:
            logger.warning("Package catalog request failed for %s: %s", package_id, exc)
            raise CatalogUnavailable(f"Package catalog request failed: {exc}", package_id=package_id) from exc
        if response.status_code == 404:
            raise PackageNotFound(package_id, version)
        if response.is_error:
            raise CatalogUnavailable(
                f"Package catalog returned {response.status_code}",
                package_id=package_id,
                status=response.status_code,
            )
        try:
            payload: Any = response.json()
            record = payload.get("package", payload) if isinstance(payload, Mapping) else payload
            if not isinstance(record, Mapping):
                raise TypeError(f"expected a JSON object, got {type(record).__name__}")
            return Package.from_dict(record)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Unreadable package record for %s: %s", package_id, exc)
            raise CatalogUnavailable(
                f"Package catalog returned an unreadable record for {package_id}",
                package_id=package_id,
            ) from exc


def open_catalog(settings: "Settings") -> PackageCatalog:
    """Build the catalog configured in ``settings`` (HTTP endpoint wins over file)."""
    if settings.catalog_url:
        return HttpPackageCatalog(settings.catalog_url, timeout=settings.catalog_timeout_s)
    return JsonPackageCatalog.load(settings.catalog_path)
