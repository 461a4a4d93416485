"""
Attestation configuration management

Loads environment-specific verification settings from a JSON document so
that development, staging and production deployments can differ in leeway,
trust anchors and logging without code changes.

Example document::

    {
        "config_format_version": "1.0",
        "environments": {
            "production": {
                "verification": {"leeway_seconds": 60, "require_trustworthiness": true},
                "trust": {"mode": "platform"},
                "logging": {"level": "WARNING", "structured": false}
            }
        },
        "defaults": {"environment": "production"}
    }
"""

import json
import logging
from typing import Dict, List, Optional, Any, Union
from dataclasses import dataclass, field
from pathlib import Path

from ..exceptions import ConfigurationError, TrustStoreError
from ..trust.store import TrustAnchors, TrustStoreHandle
from ..verification.attestation_response import AttestationResponse
from ..verification.claims import LEEWAY

logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "safetynet_sdk"
STRUCTURED_FORMAT = "time=%(asctime)s level=%(levelname)s logger=%(name)s msg=%(message)s"
SUPPORTED_CONFIG_VERSIONS = ("1.0",)


class TrustMode:
    """Where trust anchors come from"""

    PLATFORM = "platform"
    CUSTOM = "custom"
    DISABLED = "disabled"

    ALL = (PLATFORM, CUSTOM, DISABLED)


@dataclass
class VerificationSettings:
    """Verification settings"""
    leeway_seconds: float = LEEWAY
    require_trustworthiness: bool = True


@dataclass
class TrustSettings:
    """Trust anchor settings"""
    mode: str = TrustMode.PLATFORM
    pem_files: List[str] = field(default_factory=list)


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "WARNING"
    structured: bool = False

    def apply(self, logger_name: str = PACKAGE_LOGGER) -> logging.Logger:
        """
        Apply the level to the package logger.

        With ``structured`` set, a single key=value stream handler is also
        attached; applying again does not add another one.
        """
        target = logging.getLogger(logger_name)
        target.setLevel(self.level.upper())

        if self.structured and not any(getattr(h, '_safetynet_structured', False) for h in target.handlers):
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(STRUCTURED_FORMAT))
            handler._safetynet_structured = True
            target.addHandler(handler)

        return target


@dataclass
class EnvironmentConfig:
    """Environment-specific configuration"""
    verification: VerificationSettings = field(default_factory=VerificationSettings)
    trust: TrustSettings = field(default_factory=TrustSettings)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


@dataclass
class DefaultConfig:
    """Default configuration values"""
    environment: str


@dataclass
class AttestationConfig:
    """Attestation configuration structure"""
    config_format_version: str
    environments: Dict[str, EnvironmentConfig]
    defaults: DefaultConfig


class AttestationConfigManager:
    """Attestation configuration manager"""

    def __init__(self, config: AttestationConfig, environment: Optional[str] = None):
        self.config = config
        self.current_environment = environment or config.defaults.environment
        self._validate()

    @classmethod
    def from_json(cls, json_string: str, environment: Optional[str] = None) -> 'AttestationConfigManager':
        """Load configuration from JSON string"""
        try:
            data = json.loads(json_string)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Failed to parse configuration JSON: {e}", "PARSE_ERROR") from e
        return cls.from_dict(data, environment)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], environment: Optional[str] = None) -> 'AttestationConfigManager':
        """Load configuration from an already parsed document"""
        try:
            config = cls._parse_config_dict(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ConfigurationError(f"Invalid configuration format: {e}", "INVALID_FORMAT") from e
        return cls(config, environment)

    @classmethod
    def from_file(cls, file_path: Union[str, Path], environment: Optional[str] = None) -> 'AttestationConfigManager':
        """Load configuration from file"""
        try:
            json_string = Path(file_path).read_text(encoding='utf-8')
        except OSError as e:
            raise ConfigurationError(f"Failed to read configuration file: {e}", "FILE_ERROR") from e
        return cls.from_json(json_string, environment)

    def set_environment(self, environment: str) -> None:
        """Set current environment"""
        if environment not in self.config.environments:
            raise ConfigurationError(f"Environment '{environment}' not found", "ENVIRONMENT_NOT_FOUND")
        self.current_environment = environment

    def get_current_environment(self) -> str:
        return self.current_environment

    def list_environments(self) -> List[str]:
        return list(self.config.environments.keys())

    def get_current_environment_config(self) -> EnvironmentConfig:
        """Get current environment configuration"""
        env_config = self.config.environments.get(self.current_environment)
        if not env_config:
            raise ConfigurationError(
                f"Environment '{self.current_environment}' not found",
                "ENVIRONMENT_NOT_FOUND"
            )
        return env_config

    def get_verification_settings(self) -> VerificationSettings:
        return self.get_current_environment_config().verification

    def get_logging_config(self) -> LoggingConfig:
        return self.get_current_environment_config().logging

    @property
    def require_trustworthiness(self) -> bool:
        return self.get_verification_settings().require_trustworthiness

    def build_trust_anchors(self) -> TrustAnchors:
        """
        Build trust anchors for the current environment

        Raises:
            ConfigurationError: If the configured PEM files cannot be loaded
        """
        trust = self.get_current_environment_config().trust

        if trust.mode == TrustMode.DISABLED:
            return TrustAnchors.disabled()
        if trust.mode == TrustMode.CUSTOM:
            try:
                return TrustAnchors.from_pem_files(trust.pem_files)
            except TrustStoreError as e:
                raise ConfigurationError(
                    f"Environment '{self.current_environment}' trust anchors could not be loaded: {e.message}",
                    "INVALID_TRUST_CONFIG",
                    e.details
                ) from e
        return TrustAnchors.platform()

    def create_response(self, response: Optional[str], **kwargs) -> AttestationResponse:
        """
        Wrap a response with the current environment's leeway and trust anchors

        Args:
            response: Compact JWS from the attestation API
            **kwargs: Passed to ``AttestationResponse`` (e.g. ``clock``)

        Returns:
            AttestationResponse: Response bound to a dedicated trust store handle
        """
        settings = self.get_verification_settings()
        kwargs.setdefault('leeway', settings.leeway_seconds)
        kwargs.setdefault('trust_store', TrustStoreHandle(self.build_trust_anchors()))
        return AttestationResponse(response, **kwargs)

    def _validate(self) -> None:
        """Validate the configuration"""
        if self.config.config_format_version not in SUPPORTED_CONFIG_VERSIONS:
            raise ConfigurationError(
                f"Unsupported config format version '{self.config.config_format_version}'",
                "UNSUPPORTED_CONFIG_VERSION",
                {"supported": list(SUPPORTED_CONFIG_VERSIONS)}
            )

        if self.config.defaults.environment not in self.config.environments:
            raise ConfigurationError(
                f"Default environment '{self.config.defaults.environment}' not found",
                "INVALID_DEFAULT_ENVIRONMENT"
            )

        if self.current_environment not in self.config.environments:
            raise ConfigurationError(
                f"Environment '{self.current_environment}' not found",
                "ENVIRONMENT_NOT_FOUND"
            )

        for env_name, env_config in self.config.environments.items():
            leeway = env_config.verification.leeway_seconds
            if isinstance(leeway, bool) or not isinstance(leeway, (int, float)):
                raise ConfigurationError(
                    f"Environment '{env_name}' leeway must be a number of seconds",
                    "INVALID_VERIFICATION_CONFIG"
                )
            if leeway < 0:
                raise ConfigurationError(
                    f"Environment '{env_name}' has negative leeway",
                    "INVALID_VERIFICATION_CONFIG"
                )

            if not isinstance(env_config.verification.require_trustworthiness, bool):
                raise ConfigurationError(
                    f"Environment '{env_name}' require_trustworthiness must be a boolean",
                    "INVALID_VERIFICATION_CONFIG"
                )

            if env_config.trust.mode not in TrustMode.ALL:
                raise ConfigurationError(
                    f"Environment '{env_name}' has unknown trust mode '{env_config.trust.mode}'",
                    "INVALID_TRUST_CONFIG"
                )

            if env_config.trust.mode == TrustMode.CUSTOM and not env_config.trust.pem_files:
                raise ConfigurationError(
                    f"Environment '{env_name}' uses custom trust without any PEM files",
                    "INVALID_TRUST_CONFIG"
                )

            if env_config.trust.mode == TrustMode.DISABLED:
                logger.warning(f"Environment '{env_name}' disables certificate chain validation")

            level = env_config.logging.level
            if not isinstance(level, str) or not isinstance(logging.getLevelName(level.upper()), int):
                raise ConfigurationError(
                    f"Environment '{env_name}' has unknown log level '{env_config.logging.level}'",
                    "INVALID_LOGGING_CONFIG"
                )

    @staticmethod
    def _parse_config_dict(data: Dict[str, Any]) -> AttestationConfig:
        """Parse configuration dictionary into structured objects"""

        environments = {}
        for env_name, env_data in data['environments'].items():
            environments[env_name] = EnvironmentConfig(
                verification=VerificationSettings(**env_data.get('verification', {})),
                trust=TrustSettings(**env_data.get('trust', {})),
                logging=LoggingConfig(**env_data.get('logging', {})),
            )

        return AttestationConfig(
            config_format_version=data.get('config_format_version', '1.0'),
            environments=environments,
            defaults=DefaultConfig(**data['defaults'])
        )


def load_attestation_config_from_json(json_string: str, environment: Optional[str] = None) -> AttestationConfigManager:
    """Load configuration from JSON string"""
    return AttestationConfigManager.from_json(json_string, environment)


def load_attestation_config_from_file(file_path: Union[str, Path], environment: Optional[str] = None) -> AttestationConfigManager:
    """Load configuration from file"""
    return AttestationConfigManager.from_file(file_path, environment)
