from argparse import RawDescriptionHelpFormatter
from collections.abc import Awaitable
from textwrap import dedent

import argclass

from fleetctl.backend_types import Tag
from fleetctl.commands import set_tag
from fleetctl.selectors import resource_selector

TAG_SET_DESCRIPTION = dedent(
    """
    Set a tag on an application, device or release.

    You can optionally provide a value to be associated with the created
    tag, as an extra argument after the tag key. If a value isn't
    provided, a tag with an empty value is created.

    Examples:

      $ fleetctl tag set mySimpleTag --application MyApp
      $ fleetctl tag set myCompositeTag myTagValue --application MyApp
      $ fleetctl tag set myCompositeTag myTagValue --device 7cf02a6
      $ fleetctl tag set myCompositeTag "my tag value with whitespaces" --device 7cf02a6
      $ fleetctl tag set myCompositeTag myTagValue --release 1234
      $ fleetctl tag set myCompositeTag --release 1234
      $ fleetctl tag set myCompositeTag --release b376b0e544e9429483b656490e5b9443b4349bd6
    """
).strip()


class TagSetCommand(argclass.Parser):
    tag_key: str = argclass.Argument("tag_key", metavar="TAG_KEY", help="the key string of the tag")
    value: str | None = argclass.Argument(
        "value", metavar="VALUE", nargs="?", help="the optional value associated with the tag"
    )

    application: str | None = argclass.Argument(metavar="NAME_OR_ID", help="application name or id")
    app: str | None = argclass.Argument(metavar="NAME_OR_ID", help="same as '--application'")
    device: str | None = argclass.Argument(metavar="UUID_OR_ID", help="device uuid or id")
    release: str | None = argclass.Argument(metavar="ID_OR_COMMIT", help="release id or commit")

    async def __call__(self) -> Tag:
        selector = resource_selector(
            application=self.application,
            app=self.app,
            device=self.device,
            release=self.release,
        )
        return await set_tag(selector, self.tag_key, self.value)


class TagCommand(argclass.Parser):
    set: TagSetCommand | None = TagSetCommand(
        help="set a tag on an application, device or release",
        description=TAG_SET_DESCRIPTION,
        formatter_class=RawDescriptionHelpFormatter,
    )

    def __call__(self) -> Awaitable[Tag] | None:
        # Without a chosen subcommand argclass reports this parser as its own subparser
        command = self.current_subparser
        if isinstance(command, TagSetCommand):
            return command()
        return None


class Parser(argclass.Parser):
    url: str = argclass.Argument(default="https://api.fleet.example", help="Fleet API base URL")
    token: str = argclass.Argument(secret=True, help="Fleet API authentication token", required=True)
    timeout: float = argclass.Argument(default=30.0, help="HTTP request timeout in seconds")

    log_level: int = argclass.LogLevel
    tag: TagCommand | None = TagCommand(help="manage resource tags")
