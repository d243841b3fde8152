"""Gmail API authentication helper."""

import logging
import os
from pathlib import Path
from typing import Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import Resource, build

from .exceptions import NonInteractiveAuthError, ScopeMismatchError

logger = logging.getLogger(__name__)

# Triage only reads mail.
DEFAULT_SCOPES = ["https://www.googleapis.com/auth/gmail.readonly"]


class GmailAuthenticator:
    """Loads, refreshes or creates Gmail OAuth credentials.

    Credentials and token paths come from arguments, then the
    GMAIL_CREDENTIALS_PATH / GMAIL_TOKEN_PATH env vars, then config/ under
    the project root. Set GMAIL_NON_INTERACTIVE to forbid the browser flow.
    """

    def __init__(
        self,
        credentials_path: Optional[Path] = None,
        token_path: Optional[Path] = None,
        scopes: Optional[list[str]] = None,
        interactive: bool = True,
    ):
        """
        Args:
            credentials_path: OAuth client secrets file. Falls back to the
                GMAIL_CREDENTIALS_PATH env var, then config/credentials.json.
            token_path: Where the authorized-user token is read and saved.
                Falls back to GMAIL_TOKEN_PATH, then config/token.json.
            scopes: Gmail scopes the token must grant. Read-only by default.
            interactive: Allow the local-server browser consent flow. Forced
                off when GMAIL_NON_INTERACTIVE is set.
        """
        project_root = Path(__file__).parent.parent.parent
        self._credentials_path = (
            credentials_path
            or _path_from_env("GMAIL_CREDENTIALS_PATH")
            or project_root / "config" / "credentials.json"
        )
        self._token_path = (
            token_path
            or _path_from_env("GMAIL_TOKEN_PATH")
            or project_root / "config" / "token.json"
        )
        self._scopes = scopes or DEFAULT_SCOPES
        self._interactive = interactive and not os.environ.get("GMAIL_NON_INTERACTIVE")
        self._service: Optional[Resource] = None
        self._credentials: Optional[Credentials] = None

    def _has_required_scopes(self, creds: Credentials) -> bool:
        granted = creds.granted_scopes or creds.scopes
        return bool(granted) and all(scope in granted for scope in self._scopes)

    def _load_stored_token(self) -> Optional[Credentials]:
        if not self._token_path.exists():
            return None
        creds = Credentials.from_authorized_user_file(str(self._token_path), self._scopes)
        if self._has_required_scopes(creds):
            return creds
        if not self._interactive:
            raise ScopeMismatchError(
                required_scopes=self._scopes,
                token_scopes=list(creds.scopes or []),
            )
        logger.info("Stored Gmail token lacks required scopes; re-authenticating")
        self._token_path.unlink()
        return None

    def _run_consent_flow(self, creds: Optional[Credentials]) -> Credentials:
        if not self._interactive:
            reason = "no stored token" if creds is None else "token expired without refresh token"
            raise NonInteractiveAuthError(reason)
        if not self._credentials_path.exists():
            raise FileNotFoundError(
                f"Credentials file not found at {self._credentials_path}. "
                "Download OAuth client credentials from Google Cloud Console."
            )
        flow = InstalledAppFlow.from_client_secrets_file(str(self._credentials_path), self._scopes)
        return flow.run_local_server(port=0)

    def _load_or_refresh_credentials(self) -> Credentials:
        """Return valid credentials, refreshing or re-consenting as needed.

        Raises:
            FileNotFoundError: If the OAuth client file is missing.
            ScopeMismatchError: If the token lacks scopes in non-interactive mode.
            NonInteractiveAuthError: If consent is needed in non-interactive mode.
        """
        creds = self._load_stored_token()
        if creds is not None and creds.valid:
            return creds

        if creds is not None and creds.expired and creds.refresh_token:
            logger.debug("Refreshing expired Gmail token")
            creds.refresh(Request())
        else:
            creds = self._run_consent_flow(creds)

        self._token_path.parent.mkdir(parents=True, exist_ok=True)
        self._token_path.write_text(creds.to_json())
        return creds

    def get_service(self) -> Resource:
        """Get or lazily build the Gmail API service."""
        if self._service is None:
            self._credentials = self._load_or_refresh_credentials()
            self._service = build("gmail", "v1", credentials=self._credentials)
        return self._service

    @property
    def credentials(self) -> Optional[Credentials]:
        """Access the current credentials (after service creation)."""
        return self._credentials


def _path_from_env(name: str) -> Optional[Path]:
    value = os.environ.get(name)
    return Path(value) if value else None
