"""
Online Module Registry — fetching and normalizing registry schemas.

The registry serves a JSON list of module schemas shaped like
``{id, title, version, platform, properties, files, ...}``. Schemas are
normalized into descriptors marked as needing a download, then reduced to the
first entry per module name.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

import httpx

from hardware_catalog.core.resilience import CircuitBreaker, RetryPolicy
from hardware_catalog.models.descriptor import (
    AvailableType,
    HardwareModuleDescriptor,
    InvalidDescriptorError,
)

logger = logging.getLogger(__name__)


class RegistryUnavailableError(RuntimeError):
    """Raised when the registry could not deliver a module list."""


@runtime_checkable
class ModuleRegistry(Protocol):
    """Anything able to fetch raw online module schemas."""

    async def fetch(self) -> list[dict]:
        """Return the raw schema list; raise RegistryUnavailableError on failure."""
        ...


@dataclass
class RegistrySnapshot:
    """Result of one registry fetch."""

    schemas: list[HardwareModuleDescriptor] = field(default_factory=list)  # All normalized
    modules: list[HardwareModuleDescriptor] = field(default_factory=list)  # First per module name

    @property
    def duplicates(self) -> list[HardwareModuleDescriptor]:
        """Normalized schemas dropped by module-name deduplication."""
        kept = {id(m) for m in self.modules}
        return [s for s in self.schemas if id(s) not in kept]


def normalize_online_schema(schema: dict) -> HardwareModuleDescriptor:
    """
    Map a registry schema onto the descriptor shape.

    ``properties`` are flattened over the top-level fields, ``title`` becomes
    the name, and ``title``/``files`` are dropped.
    """
    if not isinstance(schema, dict):
        raise InvalidDescriptorError(f"Registry schema must be an object, got {type(schema).__name__}")

    properties = schema.get("properties") or {}
    if not isinstance(properties, dict):
        raise InvalidDescriptorError(f"Registry schema {schema.get('id')!r} has non-object properties")

    data = {k: v for k, v in schema.items() if k not in ("title", "files", "properties")}
    data.update({k: v for k, v in properties.items() if k != "name"})
    data["name"] = schema.get("title", "")

    return HardwareModuleDescriptor.from_dict(data, available_type=AvailableType.NEED_DOWNLOAD)


def deduplicate_by_module_name(
    descriptors: list[HardwareModuleDescriptor],
) -> list[HardwareModuleDescriptor]:
    """Keep the first descriptor for each module name, in input order."""
    seen: set[str | None] = set()
    unique = []
    for descriptor in descriptors:
        if descriptor.module_name in seen:
            continue
        seen.add(descriptor.module_name)
        unique.append(descriptor)
    return unique


def build_snapshot(raw_schemas: list) -> RegistrySnapshot:
    """Normalize and deduplicate raw schemas; malformed schemas are skipped."""
    schemas = []
    for raw in raw_schemas:
        try:
            schemas.append(normalize_online_schema(raw))
        except InvalidDescriptorError as e:
            logger.warning(f"Skipping malformed registry schema: {e}")

    return RegistrySnapshot(schemas=schemas, modules=deduplicate_by_module_name(schemas))


class RegistryClient:
    """
    HTTP client for the online module registry.

    Transient failures (timeouts, connection errors, 429) are retried with
    exponential backoff. Repeated failures open a circuit breaker and the
    registry is skipped until it resets.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        retry: RetryPolicy | None = None,
        circuit_breaker: CircuitBreaker | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.timeout = httpx.Timeout(timeout, connect=min(timeout, 10.0))
        self.retry = retry or RetryPolicy()
        self.circuit_breaker = circuit_breaker or CircuitBreaker()
        self.transport = transport

    async def _request(self, client: httpx.AsyncClient, attempt: int = 0) -> httpx.Response:
        """GET the registry URL, retrying transient failures."""
        try:
            resp = await client.get(self.url)
        except (httpx.TimeoutException, httpx.ConnectError) as e:
            if self.retry.allows_retry(attempt):
                delay = self.retry.delay(attempt)
                logger.debug(
                    f"Registry request failed ({type(e).__name__}), retry {attempt + 1} after {delay:.1f}s"
                )
                await asyncio.sleep(delay)
                return await self._request(client, attempt + 1)
            raise RegistryUnavailableError(
                f"Registry unreachable after {attempt + 1} attempts: {e}"
            ) from e
        except httpx.HTTPError as e:
            raise RegistryUnavailableError(f"Registry request failed: {e}") from e

        if resp.status_code == 429 and self.retry.allows_retry(attempt):
            try:
                retry_after = min(float(resp.headers.get("Retry-After", 1)), self.retry.max_delay)
            except ValueError:
                retry_after = self.retry.delay(attempt)
            logger.warning(f"Registry rate limited. Waiting {retry_after}s...")
            await asyncio.sleep(retry_after)
            return await self._request(client, attempt + 1)

        if resp.status_code != 200:
            raise RegistryUnavailableError(f"Registry returned HTTP {resp.status_code}")
        return resp

    async def fetch(self) -> list[dict]:
        """Fetch the raw schema list from the registry."""
        if self.circuit_breaker.is_open:
            raise RegistryUnavailableError("Registry circuit breaker is open")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, follow_redirects=True, transport=self.transport
            ) as client:
                resp = await self._request(client)
                payload = resp.json()
        except RegistryUnavailableError:
            self.circuit_breaker.record_failure()
            raise
        except ValueError as e:
            self.circuit_breaker.record_failure()
            raise RegistryUnavailableError(f"Registry returned invalid JSON: {e}") from e

        if isinstance(payload, dict):
            payload = payload.get("modules")
        if not isinstance(payload, list):
            self.circuit_breaker.record_failure()
            raise RegistryUnavailableError("Registry response is not a module list")

        self.circuit_breaker.record_success()
        logger.debug(f"Registry returned {len(payload)} schemas")
        return payload
