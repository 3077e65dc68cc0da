class FleetError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class InvalidTagKeyError(FleetError):
    pass


class ResourceSelectorError(FleetError):
    pass


class MissingResourceSelector(ResourceSelectorError):
    def __init__(self) -> None:
        super().__init__(
            "To set a resource tag, you must provide exactly one of:\n"
            "\n"
            "  * An application, with --application <appname>\n"
            "  * A device, with --device <uuid>\n"
            "  * A release, with --release <id or commit>\n"
            "\n"
            "See the help page for examples:\n"
            "\n"
            "  $ fleetctl tag set --help"
        )


class ConflictingResourceSelectors(ResourceSelectorError):
    def __init__(self, flags: list[str]) -> None:
        self.flags = flags
        super().__init__(
            f"Only one of --application, --device or --release may be given, got: {', '.join(flags)}"
        )


class ReleaseResolutionError(FleetError):
    pass


class ReleaseNotFoundError(ReleaseResolutionError):
    def __init__(self, ref: str) -> None:
        self.ref = ref
        super().__init__(f"Release not found: {ref!r}", status_code=404)


class AmbiguousReleaseError(ReleaseResolutionError):
    def __init__(self, ref: str, commits: list[str]) -> None:
        self.ref = ref
        self.commits = commits
        super().__init__(
            f"Release reference {ref!r} is ambiguous, it matches {len(commits)} releases: "
            f"{', '.join(commits)}. Use a longer commit prefix or the release id."
        )
