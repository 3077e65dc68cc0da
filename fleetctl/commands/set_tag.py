import logging

from fleetctl.backend_types import Tag
from fleetctl.client import validate_tag_key
from fleetctl.context import CLIENT
from fleetctl.selectors import ApplicationSelector, DeviceSelector, ReleaseSelector, ResourceSelector

log = logging.getLogger(__name__)


async def set_tag(selector: ResourceSelector, tag_key: str, value: str | None = None) -> Tag:
    """
    Set a tag on an application, device or release.
    TL;DR:
    - VALUE: Omitted value creates a tag with an empty value
    - RELEASE: Id, full commit or unambiguous commit prefix

    RETURNS: the tag as stored by the API
    """
    validate_tag_key(tag_key)
    client = CLIENT.get()
    if value is None:
        value = ""

    if isinstance(selector, ApplicationSelector):
        log.info("Setting tag %r on application %r", tag_key, selector.ref)
        return await client.set_application_tag(selector.ref, tag_key, value)
    if isinstance(selector, DeviceSelector):
        log.info("Setting tag %r on device %r", tag_key, selector.ref)
        return await client.set_device_tag(selector.ref, tag_key, value)
    if isinstance(selector, ReleaseSelector):
        release_id = await client.resolve_release(selector.ref)
        log.info("Setting tag %r on release %d", tag_key, release_id)
        return await client.set_release_tag(release_id, tag_key, value)
    raise TypeError(f"Unexpected resource selector {selector!r}")
