"""
Configuration management for the SafetyNet Attestation SDK

This module loads environment-specific verification, trust anchor and
logging settings from a JSON configuration document.
"""

from .attestation_config import (
    AttestationConfig,
    AttestationConfigManager,
    EnvironmentConfig,
    VerificationSettings,
    TrustSettings,
    TrustMode,
    LoggingConfig,
    DefaultConfig,
    load_attestation_config_from_json,
    load_attestation_config_from_file,
)

__all__ = [
    'AttestationConfig',
    'AttestationConfigManager',
    'EnvironmentConfig',
    'VerificationSettings',
    'TrustSettings',
    'TrustMode',
    'LoggingConfig',
    'DefaultConfig',
    'load_attestation_config_from_json',
    'load_attestation_config_from_file',
]
