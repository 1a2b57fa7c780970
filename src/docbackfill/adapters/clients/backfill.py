"""Client for the seller document backfill endpoint.

Each call posts one batch of classified documents as
``{"document_list": [...]}``. Optional identifiers are omitted from the
payload when unset. Any 2xx status is success; everything else, including
transport errors, is raised as ``BackfillSubmissionError``. Redirects are not
followed and nothing is retried here.
"""

from __future__ import annotations

from collections.abc import Sequence
import http.client
import json
from typing import Self
import urllib.error
import urllib.request

import loguru
from loguru import logger
from pydantic import BaseModel, Field

from docbackfill.models.document import Document

DEFAULT_BACKFILL_HOST = "http://localhost:8080"
DEFAULT_BACKFILL_PATH = "/seller-hub/internal/api/backfill_seller_document"
DEFAULT_TIMEOUT_SECONDS = 30.0


class BackfillClientError(Exception):
    """Base error for backfill client failures."""


class BackfillSubmissionError(BackfillClientError):
    """The backfill endpoint rejected a batch or could not be reached."""

    def __init__(self, description: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        self.description = description
        if status_code is None:
            super().__init__(f"Backfill submission failed: {description}")
        else:
            super().__init__(
                f"Backfill submission failed ({status_code}): {description}"
            )


class _NoRedirectHandler(urllib.request.HTTPRedirectHandler):
    """Surface 3xx replies as ``HTTPError`` instead of re-issuing them as GET."""

    def redirect_request(self, req, fp, code, msg, headers, newurl):
        return None


_OPENER = urllib.request.build_opener(_NoRedirectHandler)


# Wire models ---------------------------------------------------------------


class BackfillDocument(BaseModel):
    user_id: int | None = None
    seller_id: int | None = None
    document_type: str
    s3_key: str

    @classmethod
    def from_document(cls, document: Document) -> Self:
        return cls(
            user_id=document.user_id,
            seller_id=document.seller_id,
            document_type=document.document_type,
            s3_key=document.storage_key,
        )


class BackfillRequest(BaseModel):
    document_list: list[BackfillDocument] = Field(default_factory=list)

    @classmethod
    def from_documents(cls, documents: Sequence[Document]) -> Self:
        return cls(
            document_list=[BackfillDocument.from_document(doc) for doc in documents]
        )

    def to_payload(self) -> dict[str, object]:
        return self.model_dump(exclude_none=True)


# Logging -------------------------------------------------------------------


class BackfillClientLogger:
    """Handles all logging for BackfillClient with business logic separated."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        self._logger = logger_instance

    def submit_start(self, url: str, document_count: int) -> None:
        self._logger.bind(url=url, count=document_count).debug(
            "Posting {} documents to backfill API", document_count
        )

    def submit_success(self, url: str, status: int, document_count: int) -> None:
        self._logger.bind(url=url, status=status, count=document_count).info(
            "BackFill API call successful ({} documents)", document_count
        )

    def submit_failed(self, url: str, error: BackfillSubmissionError) -> None:
        self._logger.bind(url=url, status=error.status_code).error(
            "BackFill API call failed: {}", error.description
        )

    def dry_run(self, documents: Sequence[Document]) -> None:
        self._logger.bind(count=len(documents)).info(
            "[DRY RUN] Would submit {} documents", len(documents)
        )
        for doc in documents:
            self._logger.bind(
                document_type=doc.document_type,
                user_id=doc.user_id,
                seller_id=doc.seller_id,
            ).debug("  [DRY RUN] {} -> {}", doc.storage_key, doc.document_type)


# Clients -------------------------------------------------------------------


class BackfillClient:
    """Posts classified document batches to the backfill endpoint."""

    def __init__(
        self,
        *,
        host: str = DEFAULT_BACKFILL_HOST,
        path: str = DEFAULT_BACKFILL_PATH,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        client_logger: BackfillClientLogger | None = None,
    ) -> None:
        self._host = host
        self._path = path
        self._timeout_seconds = timeout_seconds
        self._logger = client_logger or BackfillClientLogger()

    @property
    def url(self) -> str:
        return self._host.rstrip("/") + "/" + self._path.lstrip("/")

    def submit_batch(self, documents: Sequence[Document]) -> None:
        """Submit one batch of documents. An empty batch is still posted.

        Raises:
            BackfillSubmissionError: On a transport error or non-2xx status.
        """
        payload = BackfillRequest.from_documents(documents).to_payload()
        self._logger.submit_start(self.url, len(documents))
        try:
            status = self._post(payload)
        except BackfillSubmissionError as e:
            self._logger.submit_failed(self.url, e)
            raise
        self._logger.submit_success(self.url, status, len(documents))

    def _post(self, payload: dict[str, object]) -> int:
        data = json.dumps(payload).encode("utf-8")
        req = urllib.request.Request(  # noqa: S310
            self.url,
            data=data,
            headers={"Content-Type": "application/json"},
            method="POST",
        )

        try:
            with _OPENER.open(req, timeout=self._timeout_seconds) as resp:
                status = int(resp.status)
                body = resp.read().decode("utf-8", "ignore")
        except urllib.error.HTTPError as e:
            err_body = e.read().decode("utf-8", "ignore")
            raise BackfillSubmissionError(
                err_body or str(e.reason), status_code=e.code
            ) from e
        except (
            urllib.error.URLError,
            http.client.HTTPException,
            TimeoutError,
            ConnectionError,
        ) as e:
            raise BackfillSubmissionError(f"Network error: {e}") from e

        if not 200 <= status < 300:
            raise BackfillSubmissionError(
                body or "unexpected status", status_code=status
            )
        return status


class DryRunSubmitter:
    """Logs each batch instead of posting it."""

    def __init__(self, *, client_logger: BackfillClientLogger | None = None) -> None:
        self._logger = client_logger or BackfillClientLogger()

    def submit_batch(self, documents: Sequence[Document]) -> None:
        self._logger.dry_run(documents)
