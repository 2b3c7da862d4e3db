"""Latest-release lookup against a Maven repository.

Resolves the newest released version of an artifact by reading the
repository's ``maven-metadata.xml``.  Failures are raised as
``MetadataLookupError`` and never retried.

Typical usage::

    client = MavenMetadataClient()
    sdk = await client.latest_release(api_coordinates("cloud"))
    print(sdk.version)
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET

import httpx

from mvnscaffold.config import DEFAULT_REPOSITORY_URL
from mvnscaffold.errors import MetadataLookupError
from mvnscaffold.pom.merge import Coordinates, remove_dependencies
from mvnscaffold.pom.tree import Node, find_section, find_text, parse

logger = logging.getLogger(__name__)

AEM_VERSIONS = ("cloud", "6.5")


def api_coordinates(aem_version: str | None) -> Coordinates:
    """Coordinates of the platform API artifact for *aem_version*."""
    if aem_version == "cloud":
        return Coordinates(group_id="com.adobe.aem", artifact_id="aem-sdk-api")
    return Coordinates(group_id="com.adobe.aem", artifact_id="uber-jar")


def drop_other_platform_api(dependencies: list[Node] | None, aem_version: str | None) -> None:
    """Remove the API dependency of the platform *aem_version* does not target."""
    other = "6.5" if aem_version == "cloud" else "cloud"
    remove_dependencies(dependencies, [api_coordinates(other).to_dependency()])


def testing_client_coordinates(aem_version: str | None) -> Coordinates:
    """Coordinates of the integration testing clients for *aem_version*."""
    if aem_version == "cloud":
        return Coordinates(group_id="com.adobe.cq", artifact_id="aem-cloud-testing-clients")
    return Coordinates(group_id="com.adobe.cq", artifact_id="cq-testing-clients-65")


def parse_metadata(text: str, coordinates: Coordinates, previous: bool = False) -> Coordinates:
    """Read the latest version out of a ``maven-metadata.xml`` document.

    Args:
        text: Raw metadata markup.
        coordinates: The artifact the metadata belongs to.
        previous: Also return every published version in ``versions``.

    Raises:
        MetadataLookupError: If the markup is malformed or has no version.
    """
    try:
        document = parse(text)
    except ET.ParseError as exc:
        raise MetadataLookupError(
            f"Invalid metadata for {coordinates.group_id}:{coordinates.artifact_id}: {exc}"
        ) from exc

    latest = find_text(document.nodes, "metadata", "versioning", "latest") or find_text(
        document.nodes, "metadata", "versioning", "release"
    )
    if not latest:
        raise MetadataLookupError(
            f"No released version found for {coordinates.group_id}:{coordinates.artifact_id}."
        )

    versions: list[str] = []
    if previous:
        versions = [
            node.text
            for node in find_section(document.nodes, "metadata", "versioning", "versions") or []
            if node.tag == "version" and node.text
        ]
    return coordinates.model_copy(update={"version": latest, "versions": versions})


class MavenMetadataClient:
    """Async client for repository metadata.

    Results are cached per client so a generation run that needs the same
    artifact from several generators performs a single request.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_REPOSITORY_URL,
        timeout: int = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._cache: dict[tuple[str, str, bool], Coordinates] = {}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            transport=self._transport,
        )

    async def latest_release(self, coordinates: Coordinates, previous: bool = False) -> Coordinates:
        """Return *coordinates* with ``version`` set to the latest release.

        Raises:
            MetadataLookupError: On missing coordinates, network failure,
                non-2xx response or unparsable metadata.
        """
        if not coordinates.group_id or not coordinates.artifact_id:
            raise MetadataLookupError("No Coordinates provided.")

        key = (coordinates.group_id, coordinates.artifact_id, previous)
        if key in self._cache:
            return self._cache[key]

        url = f"/{coordinates.path}/maven-metadata.xml"
        logger.debug("Fetching %s%s", self.base_url, url)
        try:
            async with self._client() as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise MetadataLookupError(
                f"Unable to fetch metadata for {coordinates.group_id}:{coordinates.artifact_id}: {exc}"
            ) from exc

        result = parse_metadata(response.text, coordinates, previous)
        self._cache[key] = result
        return result
