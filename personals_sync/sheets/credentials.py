"""Credential loading for the Sheets data source."""

from __future__ import annotations

import json
import logging

import google.auth
from google.auth.credentials import Credentials
from google.auth.exceptions import DefaultCredentialsError
from google.oauth2 import credentials as user_credentials
from google.oauth2 import service_account

from personals_sync.common.config_loader import SyncSettings
from personals_sync.common.constants import SHEETS_SCOPES
from personals_sync.common.errors import CredentialsError

LOGGER = logging.getLogger("personals_sync")


def read_credentials_info(settings: SyncSettings) -> dict:
    """Return the parsed credentials JSON, inline value first, then the file."""
    try:
        if settings.credentials_json:
            info = json.loads(settings.credentials_json)
        else:
            with settings.credentials_file.open("r", encoding="utf-8") as f:
                info = json.load(f)
    except (OSError, ValueError) as exc:
        raise CredentialsError(f"Failed to load credentials: {exc}") from exc

    if not isinstance(info, dict):
        raise CredentialsError("Failed to load credentials: expected a JSON object")
    return info


def credentials_from_info(info: dict) -> Credentials:
    scopes = list(SHEETS_SCOPES)
    try:
        if info.get("type") == "service_account":
            LOGGER.info("Using service account authentication")
            return service_account.Credentials.from_service_account_info(info, scopes=scopes)

        if info.get("type") == "authorized_user":
            LOGGER.info("Using delegated user authentication")
            return user_credentials.Credentials.from_authorized_user_info(info, scopes=scopes)

        if "installed" in info or "web" in info:
            # OAuth client files carry no token; use application default credentials.
            LOGGER.info("Using application default credentials for OAuth client")
            creds, _project = google.auth.default(scopes=scopes)
            return creds
    except (DefaultCredentialsError, ValueError, KeyError) as exc:
        raise CredentialsError(f"Failed to load credentials: {exc}") from exc

    raise CredentialsError(
        "Invalid credentials format. Expected service account, authorized user or OAuth2 client credentials."
    )


def load_credentials(settings: SyncSettings) -> Credentials:
    return credentials_from_info(read_credentials_info(settings))
