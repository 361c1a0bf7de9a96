"""GCP Secret Manager: secrets, versions and payloads."""

from lazycloud.providers.gcp.secret_manager.service import (
    SERVICE_ID,
    SecretManagerLogic,
    SecretManagerProvider,
)

__all__ = ["SERVICE_ID", "SecretManagerLogic", "SecretManagerProvider"]
