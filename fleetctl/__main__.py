import asyncio
import logging
import os
import sys

from fleetctl.app import amain
from fleetctl.arguments import Parser
from fleetctl.errors import FleetError


def main() -> None:
    parser = Parser(
        prog="fleetctl",
        config_files=[os.getenv("FLEETCTL_CONFIG", "~/.config/fleetctl/config.ini")],
        auto_env_var_prefix="FLEETCTL_",
    )
    parser.parse_args()

    logging.basicConfig(level=parser.log_level, format="[%(levelname)s] %(message)s", stream=sys.stderr)
    try:
        exit_code = asyncio.run(amain(parser))
    except FleetError as e:
        logging.debug("Command failed", exc_info=True)
        print(e.message, file=sys.stderr)
        exit_code = 1
    except KeyboardInterrupt:
        logging.info("Gracefully exited on keyboard interrupt")
        exit_code = 130
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
