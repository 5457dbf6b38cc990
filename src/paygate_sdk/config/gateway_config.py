"""
Gateway configuration for PayGate Python SDK

Provides the merchant settings shared by the signer and the extensions and
loaders reading them from dictionaries, JSON documents, files and
environment variables.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from ..crypto.rsa import DEFAULT_HASH_ALGORITHM, HashAlgorithm
from ..exceptions import ConfigurationError, ErrorCodes, ValidationError
from ..logging_utils import DEFAULT_LOG_FORMAT, configure_logging
from ..signing.signer import GatewaySigner, create_signer

ENV_PREFIX = "PAYGATE_"

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


class GatewayUrl:
    """Known gateway API endpoints"""

    TEST_1_0 = "https://iapi.iplatebnibrana.csob.cz/api/v1"
    PRODUCTION_1_0 = "https://api.platebnibrana.csob.cz/api/v1"
    TEST_1_5 = "https://iapi.iplatebnibrana.csob.cz/api/v1.5"
    PRODUCTION_1_5 = "https://api.platebnibrana.csob.cz/api/v1.5"
    TEST_1_6 = "https://iapi.iplatebnibrana.csob.cz/api/v1.6"
    PRODUCTION_1_6 = "https://api.platebnibrana.csob.cz/api/v1.6"
    TEST_1_7 = "https://iapi.iplatebnibrana.csob.cz/api/v1.7"
    PRODUCTION_1_7 = "https://api.platebnibrana.csob.cz/api/v1.7"
    TEST_1_8 = "https://iapi.iplatebnibrana.csob.cz/api/v1.8"
    PRODUCTION_1_8 = "https://api.platebnibrana.csob.cz/api/v1.8"

    TEST_LATEST = TEST_1_8
    PRODUCTION_LATEST = PRODUCTION_1_8


def _parse_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
    raise ConfigurationError(f"Invalid boolean value for {name}: {value!r}", ErrorCodes.INVALID_BOOLEAN)


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    trace: bool = False
    format: str = DEFAULT_LOG_FORMAT

    def __post_init__(self):
        """Validate logging configuration after initialization"""
        self.trace = _parse_bool(self.trace, "logging.trace")
        if not isinstance(logging.getLevelName(str(self.level).upper()), int):
            raise ConfigurationError(f"Unknown log level: {self.level}", ErrorCodes.INVALID_LOG_LEVEL)
        self.level = str(self.level).upper()

    def apply(self, handler: Optional[logging.Handler] = None) -> logging.Logger:
        """Configure SDK loggers according to this configuration"""
        return configure_logging(level=self.level, trace=self.trace, handler=handler, fmt=self.format)


@dataclass
class GatewayConfig:
    """
    Merchant configuration for the payment gateway

    Attributes:
        merchant_id: Merchant identifier assigned by the gateway
        private_key_file: Path to the merchant private key (PEM)
        bank_public_key_file: Path to the gateway public key (PEM)
        shop_name: Shop name shown to the customer
        return_url: URL the customer returns to after payment
        url: Gateway API endpoint
        private_key_password: Passphrase of an encrypted private key
        return_method: HTTP method of the return redirect
        close_payment: Whether payments are closed automatically
        hash_algorithm: Digest used in signatures
        logging_config: Logging settings
    """
    merchant_id: str
    private_key_file: str
    bank_public_key_file: str
    shop_name: str = ""
    return_url: Optional[str] = None
    url: str = GatewayUrl.TEST_1_5
    private_key_password: Optional[str] = None
    return_method: str = "POST"
    close_payment: bool = True
    hash_algorithm: Union[str, HashAlgorithm] = DEFAULT_HASH_ALGORITHM
    logging_config: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        """Validate configuration after initialization"""
        for name in ("merchant_id", "private_key_file", "bank_public_key_file"):
            if not getattr(self, name):
                raise ConfigurationError(f"Configuration value {name} is required", ErrorCodes.MISSING_VALUE, {"field": name})

        if not self.url:
            self.url = GatewayUrl.TEST_1_5
        if not self.private_key_password:
            self.private_key_password = None

        self.return_method = str(self.return_method).upper()
        if self.return_method not in ("GET", "POST"):
            raise ConfigurationError(
                f"Return method must be GET or POST, got {self.return_method}",
                ErrorCodes.INVALID_RETURN_METHOD
            )

        self.close_payment = _parse_bool(self.close_payment, "close_payment")

        try:
            self.hash_algorithm = HashAlgorithm.parse(self.hash_algorithm)
        except ValidationError as e:
            raise ConfigurationError(e.message, ErrorCodes.INVALID_HASH_ALGORITHM, e.details) from e

        if isinstance(self.logging_config, Mapping):
            self.logging_config = LoggingConfig(**self.logging_config)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GatewayConfig":
        """
        Create configuration from a dictionary.

        Unknown keys are rejected so that typos do not go unnoticed.

        Raises:
            ConfigurationError: If keys are unknown, required values missing or values invalid
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}", ErrorCodes.UNKNOWN_KEYS)

        values = dict(data)
        logging_data = values.pop("logging_config", None)
        try:
            if isinstance(logging_data, Mapping):
                values["logging_config"] = LoggingConfig(**logging_data)
            elif logging_data is not None:
                values["logging_config"] = logging_data
            return cls(**values)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration format: {e}", ErrorCodes.INVALID_FORMAT) from e

    @classmethod
    def from_json(cls, json_string: str) -> "GatewayConfig":
        """Create configuration from a JSON document"""
        try:
            data = json.loads(json_string)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Failed to parse configuration JSON: {e}", ErrorCodes.PARSE_ERROR) from e
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration JSON must be an object", ErrorCodes.INVALID_FORMAT)
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> "GatewayConfig":
        """Create configuration from a JSON file"""
        try:
            with open(Path(file_path), "r", encoding="utf-8") as f:
                json_string = f.read()
        except OSError as e:
            raise ConfigurationError(f"Failed to read configuration file: {e}", ErrorCodes.FILE_ERROR) from e
        return cls.from_json(json_string)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GatewayConfig":
        """
        Create configuration from PAYGATE_* environment variables.

        Each field maps to the upper-cased variable name, e.g.
        PAYGATE_MERCHANT_ID or PAYGATE_PRIVATE_KEY_FILE. Logging is read
        from PAYGATE_LOG_LEVEL and PAYGATE_LOG_TRACE.

        Args:
            environ: Variables to read (os.environ if None)
        """
        environ = os.environ if environ is None else environ

        values: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name == "logging_config":
                continue
            name = ENV_PREFIX + f.name.upper()
            if name in environ:
                values[f.name] = environ[name]

        logging_values: Dict[str, Any] = {}
        if ENV_PREFIX + "LOG_LEVEL" in environ:
            logging_values["level"] = environ[ENV_PREFIX + "LOG_LEVEL"]
        if ENV_PREFIX + "LOG_TRACE" in environ:
            logging_values["trace"] = environ[ENV_PREFIX + "LOG_TRACE"]
        if logging_values:
            values["logging_config"] = logging_values

        for name in ("merchant_id", "private_key_file", "bank_public_key_file"):
            if name not in values:
                raise ConfigurationError(
                    f"Environment variable {ENV_PREFIX}{name.upper()} is not set",
                    ErrorCodes.MISSING_VALUE,
                    {"field": name}
                )

        return cls.from_dict(values)

    def to_dict(self) -> Dict[str, Any]:
        """Return configuration as a JSON-compatible dictionary without the key passphrase"""
        data = asdict(self)
        data["hash_algorithm"] = HashAlgorithm.parse(self.hash_algorithm).value
        data.pop("private_key_password", None)
        return data

    def create_signer(self, **overrides: Any) -> GatewaySigner:
        """Create a GatewaySigner using this configuration"""
        return create_signer(self, **overrides)

    def __repr__(self) -> str:
        password = "'***'" if self.private_key_password else "None"
        return (
            f"GatewayConfig(merchant_id='{self.merchant_id}', url='{self.url}', "
            f"private_key_file='{self.private_key_file}', bank_public_key_file='{self.bank_public_key_file}', "
            f"private_key_password={password}, hash_algorithm='{HashAlgorithm.parse(self.hash_algorithm).value}')"
        )
