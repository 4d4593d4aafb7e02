"""Ambient Google Cloud project and credential discovery.

Both functions read process-wide ambient state (environment variables,
Application Default Credentials, the GCE metadata server). Nothing is
cached here: callers decide when discovery happens.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

import google.auth
from google.auth.exceptions import DefaultCredentialsError

from gcptelemetry.exceptions import CredentialError

if TYPE_CHECKING:
    from google.auth.credentials import Credentials

logger = logging.getLogger(__name__)

# Project ID environment variables (resolution order)
PROJECT_ID_ENV_VARS = (
    "GOOGLE_CLOUD_PROJECT",
    "GCLOUD_PROJECT",
    "GCP_PROJECT",
)

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


def discover_project_id() -> str:
    """Return the ambient Google Cloud project id, or "" if none is found.

    Environment variables are checked first, then the project attached to
    Application Default Credentials.
    """
    for var_name in PROJECT_ID_ENV_VARS:
        value = os.environ.get(var_name)
        if value:
            logger.debug("Project id taken from %s", var_name)
            return value

    try:
        _, project_id = google.auth.default(scopes=[CLOUD_PLATFORM_SCOPE])
    except DefaultCredentialsError:
        logger.debug("No application default credentials, project id unknown")
        return ""
    return project_id or ""


def default_credentials() -> Credentials:
    """Resolve Application Default Credentials for the Cloud Platform scope.

    Raises:
        CredentialError: If no credential is available in this environment.
    """
    try:
        credentials, _ = google.auth.default(scopes=[CLOUD_PLATFORM_SCOPE])
    except DefaultCredentialsError as e:
        raise CredentialError(
            "No Google Cloud credentials were configured and application "
            f"default credentials are unavailable: {e}"
        ) from e
    return credentials
