"""
Configuration settings for the Wordgate device-authentication gateway
"""

import logging
import os
import secrets
import sys
from typing import Annotated, List, Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

logger = logging.getLogger(__name__)

PRODUCTION = "production"
DEVELOPMENT = "development"

VERIFIER_FORMAT = "format"
VERIFIER_CHAIN = "chain"

DEFAULT_MODELS = ["gemini-2.5-flash", "gemini-2.5-flash-lite", "gemma-3-27b-it"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=None, case_sensitive=False)

    environment: str = DEVELOPMENT

    # Session signing
    jwt_secret_key: Optional[str] = None
    algorithm: str = "HS256"
    session_expire_seconds: int = 3600

    # Single switch for the development bypass of session enforcement
    enforce_attestation: bool = True

    # Challenge lifecycle
    challenge_ttl_seconds: int = 300
    challenge_sweep_interval_seconds: int = 300
    challenge_max_pending: int = 10000

    # Device attestation
    attestation_verifier: str = VERIFIER_FORMAT
    attestation_require_challenge: bool = True
    attestation_min_token_length: int = 100
    attestation_min_decoded_length: int = 50
    app_attest_app_id: Optional[str] = None
    app_attest_root_ca_path: Optional[str] = None
    app_attest_allow_development: bool = False

    # Generation backends, cheapest first
    gemini_api_key: str = ""
    gemini_api_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    generation_models: Annotated[List[str], NoDecode] = DEFAULT_MODELS
    generation_word_count: int = 100
    generation_attempt_timeout_seconds: float = 30.0
    topic_max_length: int = 100

    # HTTP surface
    allowed_origin: str = "*"
    expose_error_traces: bool = False

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_secret_strength(cls, v: Optional[str], info) -> Optional[str]:
        """Enforce minimum 32-character signing secrets"""
        if v is None or v == "":
            return None
        if len(v) < 32:
            raise ValueError(
                f"{info.field_name} must be at least 32 characters "
                f"(current: {len(v)}). Generate with: openssl rand -hex 32"
            )
        return v

    @field_validator("attestation_verifier")
    @classmethod
    def validate_verifier_kind(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in (VERIFIER_FORMAT, VERIFIER_CHAIN):
            raise ValueError(
                f"attestation_verifier must be '{VERIFIER_FORMAT}' or '{VERIFIER_CHAIN}', got '{v}'"
            )
        return v

    @field_validator("generation_models", mode="before")
    @classmethod
    def split_model_list(cls, v):
        """Accept a comma-separated list from the environment"""
        if isinstance(v, str):
            v = [m.strip() for m in v.split(",")]
        models = [m for m in v if m]
        if not models:
            raise ValueError("generation_models must name at least one model")
        return models

    @model_validator(mode="after")
    def block_traces_in_production(self) -> "Settings":
        if self.expose_error_traces and self.is_production:
            raise ValueError(
                f"expose_error_traces=True is FORBIDDEN in production (environment={self.environment})"
            )
        return self

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == PRODUCTION

    def validate_config(self) -> List[str]:
        """
        Validate cross-field configuration and return list of issues.

        Returns:
            List of configuration issues (empty if valid)
        """
        issues = []

        if self.is_production and not self.jwt_secret_key:
            issues.append("JWT_SECRET_KEY is required in production")

        if self.attestation_verifier == VERIFIER_CHAIN:
            if not self.app_attest_app_id:
                issues.append("APP_ATTEST_APP_ID is required for the chain verifier")
            if not self.app_attest_root_ca_path:
                issues.append("APP_ATTEST_ROOT_CA_PATH is required for the chain verifier")
            elif not os.path.isfile(self.app_attest_root_ca_path):
                issues.append(f"APP_ATTEST_ROOT_CA_PATH does not exist: {self.app_attest_root_ca_path}")

        if self.challenge_ttl_seconds <= 0:
            issues.append("CHALLENGE_TTL_SECONDS must be positive")
        if self.challenge_max_pending <= 0:
            issues.append("CHALLENGE_MAX_PENDING must be positive")
        if self.session_expire_seconds <= 0:
            issues.append("SESSION_EXPIRE_SECONDS must be positive")

        return issues

    def log_config_summary(self):
        """Log configuration summary for operators."""
        logger.info(f"Gateway config - Environment: {self.environment}, "
                    f"Verifier: {self.attestation_verifier}, "
                    f"Challenge TTL: {self.challenge_ttl_seconds}s, "
                    f"Session expiry: {self.session_expire_seconds}s, "
                    f"Models: {', '.join(self.generation_models)}")

        if not self.enforce_attestation:
            logger.warning("ENFORCE_ATTESTATION is disabled - generation requests are NOT authenticated")
        if not self.gemini_api_key:
            logger.warning("GEMINI_API_KEY is not configured - every backend call will fail")

    @classmethod
    def load_and_validate(cls, **overrides):
        """Load settings and fail fast on anything that would break serving traffic"""
        try:
            instance = cls(**overrides)
        except ValueError as e:
            print(f"ERROR: invalid configuration: {e}", file=sys.stderr)
            sys.exit(1)

        issues = instance.validate_config()
        if issues:
            for issue in issues:
                print(f"ERROR: {issue}", file=sys.stderr)
            sys.exit(1)

        if not instance.jwt_secret_key:
            # Development only; sessions do not survive a restart
            instance.jwt_secret_key = secrets.token_hex(32)
            logger.warning("WARNING: No JWT_SECRET_KEY found. Using a generated per-process key")

        return instance
