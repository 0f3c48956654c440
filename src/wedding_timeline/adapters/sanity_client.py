"""Sanity content lake HTTP API client."""

import json
from dataclasses import dataclass
from typing import Protocol

import httpx


class SanityClient(Protocol):
    """Interface for Sanity query and mutation calls."""

    async def query(
        self, groq: str, params: dict[str, object] | None = None
    ) -> object:
        """Run a GROQ query and return its result."""

    async def mutate(self, mutations: list[dict[str, object]]) -> dict[str, object]:
        """Apply a batch of mutations in one transaction."""


@dataclass
class HttpxSanityClient(SanityClient):
    """HTTPX-backed Sanity client."""

    project_id: str
    dataset: str
    api_version: str
    http_client: httpx.AsyncClient
    token: str | None = None
    use_cdn: bool = True

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        project_id: str,
        dataset: str,
        api_version: str,
        token: str | None = None,
        use_cdn: bool = True,
    ) -> "HttpxSanityClient":
        """Create a Sanity client with a managed httpx session."""
        return cls(
            project_id=project_id,
            dataset=dataset,
            api_version=api_version,
            http_client=httpx.AsyncClient(),
            token=token,
            use_cdn=use_cdn,
        )

    async def query(
        self, groq: str, params: dict[str, object] | None = None
    ) -> object:
        """Run a GROQ query against the query endpoint."""
        use_cdn = self.use_cdn and not self.token
        url = f"{self._base_url(cdn=use_cdn)}/query/{self.dataset}"
        query_params: dict[str, str] = {"query": groq}
        for name, value in (params or {}).items():
            query_params[f"${name}"] = json.dumps(value)
        response = await self.http_client.get(
            url, params=query_params, headers=self._headers(), timeout=15
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict) or "result" not in payload:
            raise RuntimeError("Unexpected Sanity query response")
        return payload["result"]

    async def mutate(self, mutations: list[dict[str, object]]) -> dict[str, object]:
        """Apply mutations through the mutate endpoint."""
        if not self.token:
            raise RuntimeError("Sanity token is required for mutations")
        url = f"{self._base_url(cdn=False)}/mutate/{self.dataset}"
        response = await self.http_client.post(
            url,
            params={"returnIds": "true"},
            json={"mutations": mutations},
            headers=self._headers(),
            timeout=15,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    def _base_url(self, *, cdn: bool) -> str:
        host = "apicdn.sanity.io" if cdn else "api.sanity.io"
        return f"https://{self.project_id}.{host}/v{self.api_version}/data"

    def _headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

