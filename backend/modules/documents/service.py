"""
Google Drive document service.

Creates RFD documents by copying a Google Docs template, filling in its
placeholders and sharing the copy. Authenticates with a service account
(optionally impersonating a user through domain-wide delegation) and talks
to the Drive and Docs REST APIs over httpx.
"""

import asyncio
import json
import logging
from datetime import date
from typing import Any, Optional

import httpx
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request as GoogleAuthRequest
from google.oauth2 import service_account

from shared.config import Settings

from .models import CreatedDocument, DocumentMetadata, DocumentTemplate
from .exceptions import DocumentServiceError, DocumentServiceNotConfiguredError

logger = logging.getLogger(__name__)

DRIVE_API = "https://www.googleapis.com/drive/v3"
DOCS_API = "https://docs.googleapis.com/v1"
SCOPES = [
    "https://www.googleapis.com/auth/drive",
    "https://www.googleapis.com/auth/documents",
]
TEMPLATE_QUERY = (
    "name contains 'RFD Template' and mimeType='application/vnd.google-apps.document'"
)


def build_replace_requests(metadata: DocumentMetadata, today: date) -> list[dict[str, Any]]:
    """Docs API `replaceAllText` requests for the template placeholders."""
    replacements = {
        "{{TITLE}}": metadata.title,
        "{{AUTHOR}}": metadata.author_name,
        "{{DESCRIPTION}}": metadata.description,
        "{{DATE}}": today.isoformat(),
        "{{TAGS}}": ", ".join(metadata.tags),
    }
    return [
        {
            "replaceAllText": {
                "containsText": {"text": placeholder, "matchCase": True},
                "replaceText": value,
            }
        }
        for placeholder, value in replacements.items()
    ]


def load_service_account_credentials(settings: Settings) -> Optional[service_account.Credentials]:
    """Build service account credentials from the JSON key in settings, if any."""
    if not settings.google_service_account_key:
        return None

    try:
        info = json.loads(settings.google_service_account_key)
        credentials = service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
    except ValueError as e:
        logger.error(f"Invalid Google service account key: {e}")
        raise DocumentServiceNotConfiguredError() from e

    if settings.google_drive_impersonate:
        credentials = credentials.with_subject(settings.google_drive_impersonate)
    return credentials


class GoogleDriveDocumentService:
    """
    Document service backed by Google Drive.

    RFD creation always uses the service account so the documents live in
    the configured folder (shared drives included). Template listing falls
    back to a user's own access token when no service account is set up.
    """

    def __init__(
        self,
        settings: Settings,
        credentials: Optional[service_account.Credentials] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._folder_id = settings.google_drive_folder_id
        self._team_emails = settings.team_email_list
        self._timeout = settings.http_timeout_seconds
        self._transport = transport
        self._credentials = (
            credentials if credentials is not None
            else load_service_account_credentials(settings)
        )

    @property
    def has_service_account(self) -> bool:
        return self._credentials is not None

    async def create_from_template(
        self,
        template_id: str,
        metadata: DocumentMetadata,
    ) -> CreatedDocument:
        token = await self._service_token()
        name = f"RFD: {metadata.title}"
        body: dict[str, Any] = {"name": name}
        if self._folder_id:
            body["parents"] = [self._folder_id]

        doc_id: Optional[str] = None
        async with self._client(token) as client:
            try:
                copy = await self._request(
                    client,
                    "POST",
                    f"{DRIVE_API}/files/{template_id}/copy",
                    params={"supportsAllDrives": "true", "fields": "id,webViewLink"},
                    json=body,
                )
                doc_id = copy["id"]

                await self._request(
                    client,
                    "POST",
                    f"{DOCS_API}/documents/{doc_id}:batchUpdate",
                    json={"requests": build_replace_requests(metadata, date.today())},
                )
                await self._share(client, doc_id, metadata.author_email)
            except (httpx.HTTPError, KeyError, ValueError) as e:
                if doc_id:
                    logger.error(f"Failed to prepare document {doc_id} from template {template_id}: {e}")
                else:
                    logger.error(f"Failed to copy template {template_id}: {e}")
                raise DocumentServiceError("Failed to create RFD document") from e

        doc_url = copy.get("webViewLink") or f"https://docs.google.com/document/d/{doc_id}/edit"
        logger.info(f"Created document {doc_id} from template {template_id}")
        return CreatedDocument(doc_id=doc_id, doc_url=doc_url, title=name)

    async def list_templates(self, user_access_token: Optional[str] = None) -> list[DocumentTemplate]:
        if self._credentials is not None:
            token = await self._service_token()
        elif user_access_token:
            token = user_access_token
        else:
            raise DocumentServiceNotConfiguredError()

        async with self._client(token) as client:
            try:
                data = await self._request(
                    client,
                    "GET",
                    f"{DRIVE_API}/files",
                    params={
                        "q": TEMPLATE_QUERY,
                        "fields": "files(id,name,createdTime,modifiedTime)",
                        "supportsAllDrives": "true",
                        "includeItemsFromAllDrives": "true",
                    },
                )
            except (httpx.HTTPError, ValueError) as e:
                logger.error(f"Failed to list RFD templates: {e}")
                raise DocumentServiceError("Failed to list RFD templates") from e

        return [
            DocumentTemplate(
                id=item["id"],
                name=item["name"],
                created_time=item.get("createdTime"),
                modified_time=item.get("modifiedTime"),
            )
            for item in data.get("files", [])
        ]

    async def _share(self, client: httpx.AsyncClient, doc_id: str, creator_email: Optional[str]) -> None:
        """Creator and team get writer access; anyone with the link may comment."""
        if creator_email:
            await self._grant(client, doc_id, {"role": "writer", "type": "user", "emailAddress": creator_email})

        await self._grant(client, doc_id, {"role": "commenter", "type": "anyone"})

        for email in self._team_emails:
            if email == creator_email:
                continue
            try:
                await self._grant(client, doc_id, {"role": "writer", "type": "user", "emailAddress": email})
            except httpx.HTTPError as e:
                logger.warning(f"Failed to add editor permission for {email} on {doc_id}: {e}")

    async def _grant(self, client: httpx.AsyncClient, doc_id: str, permission: dict[str, str]) -> None:
        await self._request(
            client,
            "POST",
            f"{DRIVE_API}/files/{doc_id}/permissions",
            params={"supportsAllDrives": "true"},
            json=permission,
        )

    async def _service_token(self) -> str:
        if self._credentials is None:
            raise DocumentServiceNotConfiguredError()

        if not self._credentials.valid:
            try:
                # google-auth refreshes synchronously over requests
                await asyncio.to_thread(self._credentials.refresh, GoogleAuthRequest())
            except GoogleAuthError as e:
                logger.error(f"Failed to obtain service account token: {e}")
                raise DocumentServiceError() from e

        return self._credentials.token

    @staticmethod
    async def _request(
        client: httpx.AsyncClient,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> dict[str, Any]:
        response = await client.request(method, url, **kwargs)
        response.raise_for_status()
        return response.json()

    def _client(self, token: str) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._timeout,
            transport=self._transport,
            headers={"Authorization": f"Bearer {token}"},
        )
