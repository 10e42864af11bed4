"""
Mimir/Cortex Ruler API store.

Push SLO rule groups to Mimir or Cortex via the Ruler API.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog
import yaml

from pyrra_controller.artifacts.models import MimirRuleGroup
from pyrra_controller.errors import MimirRulerError, NotFoundError
from pyrra_controller.kube.resources import ObjectKey

DEFAULT_USER_AGENT = "pyrra-controller-mimir/0.1.0"

logger = structlog.get_logger()


class MimirRulerClient:
    """
    Client for the Mimir/Cortex Ruler API.

    API endpoints:
        GET /api/v1/rules/{namespace}/{groupName} - Read one rule group
        POST /api/v1/rules/{namespace} - Create/update a rule group
    """

    def __init__(
        self,
        ruler_url: str,
        *,
        tenant_id: str | None = None,
        api_key: str | None = None,
        username: str | None = None,
        password: str | None = None,
        timeout: float = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        """
        Initialize Mimir Ruler client.

        Args:
            ruler_url: Base URL of the Mimir Ruler API
            tenant_id: Tenant ID for multi-tenant setups (X-Scope-OrgID header)
            api_key: Bearer token for authentication
            username: Basic auth username
            password: Basic auth password
            timeout: Request timeout in seconds
            user_agent: User agent string
        """
        self._base_url = ruler_url.rstrip("/")
        self._tenant_id = tenant_id
        self._api_key = api_key
        self._timeout = timeout
        self._user_agent = user_agent
        self._auth = (username, password) if username and password else None

    async def get_rule_group(self, namespace: str, group_name: str) -> dict[str, Any]:
        """
        Read a single rule group.

        Returns:
            The rule group as parsed from the ruler's YAML response

        Raises:
            NotFoundError: If the namespace has no such group
            MimirRulerError: If the API request fails
        """
        url = f"{self._base_url}/api/v1/rules/{namespace}/{group_name}"

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(
                    url,
                    headers=self._build_headers(),
                    auth=self._auth,  # type: ignore[arg-type]
                )
        except httpx.ConnectError as e:
            raise MimirRulerError(f"Failed to connect to Mimir at {url}: {e}") from e
        except httpx.TimeoutException as e:
            raise MimirRulerError(f"Timeout connecting to Mimir at {url}: {e}") from e
        except httpx.HTTPError as e:
            raise MimirRulerError(f"HTTP error from Mimir: {e}") from e

        if response.status_code == 404:
            raise NotFoundError("rule group", f"{namespace}/{group_name}")
        if response.status_code != 200:
            raise MimirRulerError(
                f"Failed to get rule group: {response.status_code} {response.text[:200]}"
            )

        try:
            data = yaml.safe_load(response.text)
        except yaml.YAMLError as e:
            raise MimirRulerError(f"Invalid rule group returned by Mimir: {e}") from e
        if not isinstance(data, dict):
            raise MimirRulerError("Invalid rule group returned by Mimir: not a mapping")
        return data

    async def create_rule_group(self, namespace: str, group_yaml: str) -> None:
        """
        Create or replace a rule group in a namespace.

        Args:
            namespace: Namespace to push the group to
            group_yaml: YAML content of a single rule group

        Raises:
            MimirRulerError: If the API request fails
        """
        headers = self._build_headers()
        headers["Content-Type"] = "application/yaml"

        url = f"{self._base_url}/api/v1/rules/{namespace}"

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    url,
                    content=group_yaml,
                    headers=headers,
                    auth=self._auth,  # type: ignore[arg-type]
                )
        except httpx.ConnectError as e:
            raise MimirRulerError(f"Failed to connect to Mimir at {url}: {e}") from e
        except httpx.TimeoutException as e:
            raise MimirRulerError(f"Timeout connecting to Mimir at {url}: {e}") from e
        except httpx.HTTPError as e:
            raise MimirRulerError(f"HTTP error from Mimir: {e}") from e

        if response.status_code not in (200, 202):
            error_text = response.text[:200] if response.text else "Unknown error"
            raise MimirRulerError(f"Failed to push rules: {response.status_code} {error_text}")

    def _build_headers(self) -> dict[str, str]:
        """Build request headers."""
        headers = {
            "User-Agent": self._user_agent,
        }

        if self._tenant_id:
            headers["X-Scope-OrgID"] = self._tenant_id

        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        return headers


class MimirRuleGroupStore:
    """Artifact store view over the ruler; create and update both push the group."""

    kind = "MimirRuleGroup"

    def __init__(self, ruler: MimirRulerClient) -> None:
        self._ruler = ruler

    async def get(self, key: ObjectKey) -> MimirRuleGroup:
        data = await self._ruler.get_rule_group(key.namespace, key.name)
        return MimirRuleGroup.from_dict(key.namespace, data)

    async def create(self, artifact: MimirRuleGroup) -> str:
        await self._push(artifact)
        return ""

    async def update(self, artifact: MimirRuleGroup) -> None:
        await self._push(artifact)

    async def _push(self, artifact: MimirRuleGroup) -> None:
        logger.debug(
            "pushing_rule_group",
            namespace=artifact.namespace,
            group=artifact.name,
            rules=len(artifact.rules),
        )
        await self._ruler.create_rule_group(artifact.namespace, artifact.to_yaml())
