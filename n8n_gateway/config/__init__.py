"""Configuration module: gateway settings."""

from n8n_gateway.config.settings import GatewaySettings

__all__ = ["GatewaySettings"]
