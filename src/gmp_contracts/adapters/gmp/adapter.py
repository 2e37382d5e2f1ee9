"""Axelarscan GMPStats adapter.

Counts distinct destination contracts seen by the GMP analytics API for a
network and time range. Every failure degrades to a count of zero so that a
single bad request never aborts a run.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from ...config.settings import MAINNET_API_URL, TESTNET_API_URL
from ...observability import StatusLogger, get_logger
from ...rollups.time_windows import TimeRange

__all__ = [
    "CountResult",
    "GMPAdapterConfig",
    "GMPStatsAdapter",
    "GMPStatsError",
    "NetworkId",
    "create_gmp_adapter",
    "extract_contract_keys",
]


class NetworkId(str, Enum):
    """Networks served by GMPStats."""

    MAINNET = "mainnet"
    TESTNET = "testnet"


class GMPStatsError(Exception):
    """Raised for unusable GMPStats responses."""

    pass


@dataclass
class GMPAdapterConfig:
    """Configuration for the GMPStats adapter."""

    mainnet_url: str = MAINNET_API_URL
    testnet_url: str = TESTNET_API_URL
    timeout: float = 60.0


@dataclass(frozen=True)
class CountResult:
    """Outcome of one count request.

    ``error`` is None when the API answered; a failed request still carries
    ``count == 0``.
    """

    network: NetworkId
    time_range: TimeRange
    count: int
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _iter_objects(value: Any) -> Iterator[dict[str, Any]]:
    """Yield the dict elements of ``value`` if it is a list."""
    if isinstance(value, list):
        for item in value:
            if isinstance(item, dict):
                yield item


def _iter_contracts(message: dict[str, Any]) -> Iterator[dict[str, Any]]:
    for source in _iter_objects(message.get("source_chains")):
        for destination in _iter_objects(source.get("destination_chains")):
            yield from _iter_objects(destination.get("contracts"))

    for destination in _iter_objects(message.get("destination_chains")):
        yield from _iter_objects(destination.get("contracts"))


def extract_contract_keys(messages: list[Any]) -> set[str]:
    """Collect distinct contract keys from GMPStats messages.

    Keys are read from ``source_chains[].destination_chains[].contracts[]``
    and ``destination_chains[].contracts[]``. Missing, empty or non-string
    keys are ignored.

    Parameters
    ----------
    messages
        The ``messages`` array of a GMPStats response

    Returns
    -------
    set[str]
        Distinct contract keys

    Examples
    --------
    >>> extract_contract_keys([
    ...     {"destination_chains": [{"contracts": [{"key": "A"}, {"key": ""}]}]},
    ...     {"source_chains": [{"destination_chains": [{"contracts": [{"key": "A"}]}]}]},
    ... ])
    {'A'}
    """
    keys: set[str] = set()
    for message in _iter_objects(messages):
        for contract in _iter_contracts(message):
            key = contract.get("key")
            if isinstance(key, str) and key:
                keys.add(key)
    return keys


class GMPStatsAdapter:
    """Async client for the GMPStats endpoints.

    Use as an async context manager to share one connection pool across
    concurrent calls; otherwise every call opens its own client.

    Example:
        >>> async with create_gmp_adapter() as adapter:
        ...     count = await adapter.count("mainnet", 1714000000, 1716000000)
    """

    def __init__(
        self,
        config: GMPAdapterConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: StatusLogger | None = None,
    ) -> None:
        """Initialize GMPStats adapter.

        Parameters
        ----------
        config
            Adapter configuration
        transport
            Optional httpx transport (tests use ``httpx.MockTransport``)
        logger
            Logger exposing info/success/warning/error
        """
        self.config = config
        self.transport = transport
        self.logger = logger or get_logger("gmp")
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> GMPStatsAdapter:
        self._client = self._make_client()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _make_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.config.timeout, transport=self.transport)

    def endpoint_for(self, network: NetworkId | str) -> str:
        """Return the GMPStats URL for a network.

        Raises
        ------
        ValueError
            If the network is not supported
        """
        network = NetworkId(network)
        if network is NetworkId.MAINNET:
            return self.config.mainnet_url
        return self.config.testnet_url

    async def _post(self, url: str, payload: dict[str, int]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(url, json=payload)
        async with self._make_client() as client:
            return await client.post(url, json=payload)

    async def fetch_messages(self, network: NetworkId | str, time_range: TimeRange) -> Any:
        """POST a time range and return the raw ``messages`` field.

        Raises
        ------
        GMPStatsError
            On HTTP error status or a body that is not a JSON object
        httpx.HTTPError
            On transport failures
        """
        url = self.endpoint_for(network)
        self.logger.info(f"Initiating API call for {NetworkId(network).value.upper()} using URL: {url}")
        self.logger.info(f"Time range: {time_range.start} to {time_range.end} (Unix timestamps)")

        response = await self._post(url, time_range.to_payload())

        if response.status_code >= 400:
            raise GMPStatsError(f"GMPStats API error ({response.status_code}): {response.text[:200]}")

        data = response.json()
        if not isinstance(data, dict):
            raise GMPStatsError(f"Unexpected response body of type {type(data).__name__}")

        return data.get("messages")

    async def count_detailed(self, network: NetworkId | str, time_range: TimeRange) -> CountResult:
        """Count distinct contracts, reporting any error alongside the count.

        Parameters
        ----------
        network
            ``mainnet`` or ``testnet``
        time_range
            Query range in Unix seconds

        Returns
        -------
        CountResult
            Count (0 on failure) and the error message, if any
        """
        try:
            network = NetworkId(network)
            messages = await self.fetch_messages(network, time_range)

        except httpx.TimeoutException:
            error = f"request timed out after {self.config.timeout}s"
        except (httpx.HTTPError, httpx.InvalidURL, GMPStatsError, ValueError) as exc:
            error = str(exc) or type(exc).__name__
        else:
            if not isinstance(messages, list):
                self.logger.warning(f"No messages array in API response for {network.value}.")
                return CountResult(network, time_range, 0)

            self.logger.info(f"API returned {len(messages)} messages for {network.value}.")
            keys = extract_contract_keys(messages)
            self.logger.info(f"Processed API response for {network.value}: Found {len(keys)} unique contract(s).")
            return CountResult(network, time_range, len(keys))

        label = network.value if isinstance(network, NetworkId) else network
        self.logger.error(
            f"Error fetching data for {label} (from {time_range.start} to {time_range.end}): {error}"
        )
        return CountResult(network, time_range, 0, error=error)

    async def count(self, network: NetworkId | str, start: int, end: int) -> int:
        """Count distinct contracts for ``network`` between ``start`` and ``end``.

        Never raises for API problems: failures return 0.
        """
        result = await self.count_detailed(network, TimeRange(start, end))
        return result.count


def create_gmp_adapter(
    *,
    mainnet_url: str = MAINNET_API_URL,
    testnet_url: str = TESTNET_API_URL,
    timeout: float = 60.0,
    transport: httpx.AsyncBaseTransport | None = None,
    logger: StatusLogger | None = None,
) -> GMPStatsAdapter:
    """Factory function to create a GMPStats adapter.

    Example:
        >>> adapter = create_gmp_adapter(timeout=30.0)
    """
    config = GMPAdapterConfig(mainnet_url=mainnet_url, testnet_url=testnet_url, timeout=timeout)
    return GMPStatsAdapter(config, transport=transport, logger=logger)
