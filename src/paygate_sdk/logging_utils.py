"""
Logging setup for PayGate Python SDK

The SDK logs through standard library loggers under the "paygate_sdk"
namespace. Canonical base strings and other raw protocol data go to the
dedicated trace logger so they can be routed or silenced separately.
"""

import logging
from typing import Optional, Union

SDK_LOGGER_NAME = "paygate_sdk"
TRACE_LOGGER_NAME = "paygate_sdk.trace"

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

trace_logger = logging.getLogger(TRACE_LOGGER_NAME)


def get_trace_logger() -> logging.Logger:
    """Return the logger receiving canonical base strings"""
    return trace_logger


def configure_logging(
    level: Union[int, str] = logging.INFO,
    trace: bool = False,
    handler: Optional[logging.Handler] = None,
    fmt: str = DEFAULT_LOG_FORMAT,
) -> logging.Logger:
    """
    Attach a handler to the SDK logger.

    Args:
        level: Level of the SDK logger
        trace: Whether the trace logger emits base strings (DEBUG) or stays quiet
        handler: Handler to attach (stderr stream handler if None)
        fmt: Log record format

    Returns:
        logging.Logger: The configured SDK logger
    """
    sdk_logger = logging.getLogger(SDK_LOGGER_NAME)

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    if handler is None:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt))

    # Replace handlers installed by an earlier call
    for existing in list(sdk_logger.handlers):
        sdk_logger.removeHandler(existing)
    sdk_logger.addHandler(handler)
    sdk_logger.setLevel(level)

    trace_logger.setLevel(logging.DEBUG if trace else logging.WARNING)
    return sdk_logger
