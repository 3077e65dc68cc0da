import re
from dataclasses import dataclass

from .errors import ConflictingResourceSelectors, MissingResourceSelector

# Digits only, no sign and no leading zeros: the int must print back as the input
INTEGER_PATTERN = re.compile(r"^(0|[1-9][0-9]*)$")


def try_as_integer(value: str) -> int | str:
    if INTEGER_PATTERN.match(value):
        return int(value)
    return value


@dataclass(frozen=True)
class ApplicationSelector:
    ref: int | str


@dataclass(frozen=True)
class DeviceSelector:
    ref: int | str


@dataclass(frozen=True)
class ReleaseSelector:
    ref: str


ResourceSelector = ApplicationSelector | DeviceSelector | ReleaseSelector


def resource_selector(
    application: str | None = None,
    device: str | None = None,
    release: str | None = None,
    app: str | None = None,
) -> ResourceSelector:
    """Build the single resource a tag operation targets.

    ``app`` is the deprecated spelling of ``application``. Empty values
    count as not given. Raises :class:`MissingResourceSelector` when nothing
    was selected and :class:`ConflictingResourceSelectors` when more than
    one resource was.
    """
    given = {
        flag: value
        for flag, value in (
            ("--application", application),
            ("--app", app),
            ("--device", device),
            ("--release", release),
        )
        if value
    }

    if not given:
        raise MissingResourceSelector()
    if len(given) > 1:
        raise ConflictingResourceSelectors(list(given))

    ((flag, value),) = given.items()
    if flag in ("--application", "--app"):
        return ApplicationSelector(ref=try_as_integer(value))
    if flag == "--device":
        return DeviceSelector(ref=try_as_integer(value))
    return ReleaseSelector(ref=value)
