import importlib.metadata
import logging
import platform
import re
import sys
from collections.abc import Mapping
from functools import cached_property
from types import MappingProxyType
from typing import Any, Literal, TypeVar

import httpx
from pydantic import BaseModel
from typing_extensions import Self

from .backend_types import Release, ReleaseListResponse, Tag
from .errors import AmbiguousReleaseError, FleetError, InvalidTagKeyError, ReleaseNotFoundError

ModelT = TypeVar("ModelT", bound=BaseModel)

TagResource = Literal["application", "device", "release"]

# A purely numeric release reference may be either an id or a commit prefix
RELEASE_ID_PATTERN = re.compile(r"^[1-9][0-9]*$")
WHITESPACE_PATTERN = re.compile(r"\s")

log = logging.getLogger(__name__)


def validate_tag_key(tag_key: str) -> None:
    if not tag_key:
        raise InvalidTagKeyError("Tag key must not be empty")
    if WHITESPACE_PATTERN.search(tag_key):
        raise InvalidTagKeyError(f"Tag key must not contain whitespace: {tag_key!r}")


class FleetClient:
    PYTHON_VERSION = f"{'.'.join(map(str, sys.version_info[:3]))}"
    try:
        LIBRARY_VERSION = importlib.metadata.version("fleetctl")
    except Exception:
        LIBRARY_VERSION = "unknown"

    OS_NAME = platform.system()
    OS_VERSION = platform.release()

    HEADERS = (
        ("Content-Type", "application/json"),
        (
            "User-Agent",
            " ".join(
                (
                    f"fleetctl/{LIBRARY_VERSION}",
                    f"python/{PYTHON_VERSION}",
                    f"{OS_NAME}/{OS_VERSION}",
                )
            ),
        ),
    )

    def __init__(self, base_url: str, token: str, timeout: float = 30.0):
        self.base_url = base_url.rstrip("/") + "/v1"
        self.token = token
        self.timeout = httpx.Timeout(timeout)

    @cached_property
    def headers(self) -> Mapping[str, str]:
        hdrs = dict(self.HEADERS)
        hdrs["Authorization"] = f"Bearer {self.token}"
        return MappingProxyType(hdrs)

    @cached_property
    def session(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(headers=self.headers, timeout=self.timeout)

    async def close(self) -> None:
        if "session" in self.__dict__:
            await self.session.aclose()
            del self.__dict__["session"]

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        model: type[ModelT],
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> ModelT:
        """
        Perform an HTTP request and validate the JSON response into ``model``.
        Raises FleetError on transport failures and on any status >= 400.
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        log.debug("%s %s", method, path)
        try:
            response = await self.session.request(method, url, params=params, json=json)
        except httpx.HTTPError as e:
            raise FleetError(f"{method} {path} failed: {e}") from e

        if response.status_code >= 400:
            error_msg = response.text or f"HTTP {response.status_code}"
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("error"):
                error_msg = str(body["error"])

            log.debug("%s %s -> %d: %s", method, path, response.status_code, error_msg)
            raise FleetError(error_msg, response.status_code)

        log.debug("%s %s -> %d", method, path, response.status_code)
        try:
            return model.model_validate_json(response.content)
        except ValueError as e:
            raise FleetError(f"{method} {path}: invalid response: {e}", response.status_code) from e

    async def _set_tag(self, resource: TagResource, ref: int | str, tag_key: str, value: str) -> Tag:
        validate_tag_key(tag_key)
        return await self._request(
            "PUT",
            f"/{resource}_tags",
            model=Tag,
            json={resource: ref, "tag_key": tag_key, "value": value},
        )

    async def set_application_tag(self, application: int | str, tag_key: str, value: str) -> Tag:
        return await self._set_tag("application", application, tag_key, value)

    async def set_device_tag(self, device: int | str, tag_key: str, value: str) -> Tag:
        return await self._set_tag("device", device, tag_key, value)

    async def set_release_tag(self, release_id: int, tag_key: str, value: str) -> Tag:
        return await self._set_tag("release", release_id, tag_key, value)

    async def list_releases(self, commit_prefix: str) -> list[Release]:
        response = await self._request(
            "GET", "/releases", model=ReleaseListResponse, params={"commit_prefix": commit_prefix}
        )
        return response.releases

    async def get_release(self, release_id: int) -> Release:
        return await self._request("GET", f"/releases/{release_id}", model=Release)

    async def _release_by_commit(self, ref: str) -> Release:
        releases = await self.list_releases(commit_prefix=ref)
        if not releases:
            raise ReleaseNotFoundError(ref)
        if len(releases) > 1:
            raise AmbiguousReleaseError(ref, [release.commit for release in releases])
        return releases[0]

    async def resolve_release(self, ref: str) -> int:
        """Resolve a release id, full commit or commit prefix to a release id."""
        if not ref:
            raise ReleaseNotFoundError(ref)

        if not RELEASE_ID_PATTERN.match(ref):
            return (await self._release_by_commit(ref)).id

        try:
            release = await self._release_by_commit(ref)
        except ReleaseNotFoundError:
            log.debug("No release with commit prefix %r, looking it up as an id", ref)
        else:
            return release.id

        try:
            release = await self.get_release(int(ref))
        except FleetError as e:
            if e.status_code == 404:
                raise ReleaseNotFoundError(ref) from e
            raise
        return release.id
