import logging
from collections.abc import Awaitable
from contextlib import AsyncExitStack
from typing import Any

from fleetctl.arguments import Parser
from fleetctl.client import FleetClient
from fleetctl.context import CLIENT

log = logging.getLogger(__name__)

EXIT_USAGE = 2


async def amain(parser: Parser) -> int:
    command: Awaitable[Any] | None = parser()
    if command is None:
        parser.print_help()
        return EXIT_USAGE

    async with AsyncExitStack() as stack:
        client = await stack.enter_async_context(
            FleetClient(base_url=parser.url, token=parser.token, timeout=parser.timeout)
        )
        CLIENT.set(client)

        result = await command
        log.debug("Command finished: %r", result)
    return 0
