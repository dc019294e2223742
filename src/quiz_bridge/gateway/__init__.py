"""Control channel for the agent process."""

from quiz_bridge.gateway.server import BridgeGateway, create_app

__all__ = ["BridgeGateway", "create_app"]
