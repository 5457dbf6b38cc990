"""
Configuration management for PayGate Python SDK

This module provides the merchant configuration shared by the signer and
the extensions, with loaders for dictionaries, JSON and the environment.
"""

from .gateway_config import (
    ENV_PREFIX,
    GatewayConfig,
    GatewayUrl,
    LoggingConfig,
)

__all__ = [
    'ENV_PREFIX',
    'GatewayConfig',
    'GatewayUrl',
    'LoggingConfig',
]
