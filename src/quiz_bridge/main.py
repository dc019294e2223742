"""Main entry point for quiz-bridge."""

import asyncio
import importlib
import logging
import sys

from dotenv import load_dotenv

from quiz_bridge.bridge import Bridge
from quiz_bridge.config import Config, load_config, load_legacy_env
from quiz_bridge.transport import Transport


def setup_logging(debug: bool = False) -> None:
    """Configure logging for the application."""
    level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Reduce noise from libraries
    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.WARNING)
    logging.getLogger("websockets").setLevel(logging.WARNING)


def load_transport(path: str, config: Config) -> Transport:
    """Build a transport from a "module:callable" path.

    The callable receives the application config and returns the transport.
    """
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Transport factory must look like 'module:callable', got {path!r}")

    module = importlib.import_module(module_name)
    factory = getattr(module, attr)
    transport = factory(config)
    if not isinstance(transport, Transport):
        raise TypeError(f"{path} did not return a transport")
    return transport


async def async_main(
    config_path: str | None = None,
    debug: bool = False,
    transport_path: str | None = None,
    port: int | None = None,
) -> None:
    """Async main entry point."""
    setup_logging(debug)
    logger = logging.getLogger(__name__)

    # Load .env file if present
    load_dotenv()

    config = load_config(config_path)
    config = load_legacy_env(config)
    if port is not None:
        config.gateway.port = port

    factory = transport_path or config.transport.factory
    if not factory:
        logger.error("No transport configured (use --transport or transport.factory)")
        sys.exit(1)

    try:
        transport = load_transport(factory, config)
    except (ImportError, AttributeError, ValueError, TypeError) as e:
        logger.error(f"Could not load transport {factory}: {e}")
        sys.exit(1)

    logger.info("Starting quiz bridge...")
    logger.info(f"Transport: {factory}")
    logger.info(f"Auth dir: {config.transport.auth_dir}")

    bridge = Bridge(config, transport)

    try:
        await bridge.start()
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)


def main() -> None:
    """Main entry point (sync wrapper)."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Quiz bridge: group-chat transport to agent control channel",
    )
    parser.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        help="Path to config file (default: config.yaml)",
    )
    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--transport",
        type=str,
        default=None,
        help="Transport factory as module:callable (overrides config)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Control channel port (overrides config)",
    )

    args = parser.parse_args()

    asyncio.run(async_main(
        config_path=args.config,
        debug=args.debug,
        transport_path=args.transport,
        port=args.port,
    ))


if __name__ == "__main__":
    main()
