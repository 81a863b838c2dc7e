"""Validators for caller-supplied URLs."""

from n8n_gateway.validators.url_validator import (
    ensure_url_allowed,
    is_private_ip,
    validate_url,
)

__all__ = ["ensure_url_allowed", "is_private_ip", "validate_url"]
