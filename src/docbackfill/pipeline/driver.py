from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, NoReturn

import loguru
from loguru import logger

from docbackfill.adapters.clients.backfill import BackfillClientError
from docbackfill.adapters.storage.s3 import MAX_KEYS_LIMIT, KeyPage, S3StorageError
from docbackfill.classification.classifier import KeyClassifier, SkipReason
from docbackfill.pipeline.protocol import BatchSink, KeySource

DEFAULT_PAGE_SIZE = 20

SubmissionFailurePolicy = Literal["abort", "continue"]


class RunState(Enum):
    LISTING = "listing"
    CLASSIFYING = "classifying"
    SUBMITTING = "submitting"
    DONE = "done"
    ABORTED = "aborted"


@dataclass
class FailedPage:
    """A page whose batch the sink rejected under the ``continue`` policy."""

    page_number: int
    cursor: str | None
    document_count: int
    error: str


@dataclass
class RunSummary:
    """Progress of a single migration run."""

    prefix: str
    state: RunState = RunState.LISTING
    pages_listed: int = 0
    keys_seen: int = 0
    documents_submitted: int = 0
    skipped: dict[SkipReason, int] = field(default_factory=dict)
    failed_pages: list[FailedPage] = field(default_factory=list)
    # Cursor the current (or last) page was listed with; restart point on abort.
    cursor: str | None = None

    @property
    def skipped_count(self) -> int:
        return sum(self.skipped.values())

    def record_skips(self, skipped: dict[SkipReason, int]) -> None:
        for reason, count in skipped.items():
            self.skipped[reason] = self.skipped.get(reason, 0) + count


class MigrationAbortedError(Exception):
    """A run stopped on a listing failure or a fatal submission failure."""

    def __init__(self, message: str, *, summary: RunSummary) -> None:
        super().__init__(message)
        self.summary = summary


class DriverLogger:
    """Handles all logging for PaginationDriver with business logic separated."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        self._logger = logger_instance

    def run_start(self, prefix: str, page_size: int, cursor: str | None) -> None:
        self._logger.bind(prefix=prefix, page_size=page_size, cursor=cursor).info(
            "Listing keys under {!r} ({} per page)", prefix, page_size
        )

    def fetch_start(self, page_num: int, cursor: str | None) -> None:
        cursor_label = cursor or "initial"
        self._logger.bind(page=page_num, cursor=cursor_label).info(
            "Retrieving page {} (cursor: {})", page_num, cursor_label
        )

    def page_classified(
        self, page_num: int, key_count: int, document_count: int, skipped: int
    ) -> None:
        self._logger.bind(
            page=page_num, keys=key_count, documents=document_count, skipped=skipped
        ).info(
            "Page {}: {} keys, {} documents, {} skipped",
            page_num,
            key_count,
            document_count,
            skipped,
        )

    def page_submitted(self, page_num: int, document_count: int) -> None:
        self._logger.bind(page=page_num, count=document_count).info(
            "Processed key list successfully (page {}, {} documents)",
            page_num,
            document_count,
        )

    def page_failed_continuing(self, page_num: int, error: Exception) -> None:
        self._logger.bind(page=page_num).warning(
            "Submission failed for page {}, continuing: {}", page_num, error
        )

    def more_pages(self) -> None:
        self._logger.debug("More pages to fetch...")

    def run_complete(self, summary: RunSummary) -> None:
        self._logger.bind(
            pages=summary.pages_listed,
            keys=summary.keys_seen,
            documents=summary.documents_submitted,
            skipped=summary.skipped_count,
            failed_pages=len(summary.failed_pages),
        ).info(
            "All objects have been listed: {} pages, {} keys, {} documents submitted, "
            "{} skipped, {} failed pages",
            summary.pages_listed,
            summary.keys_seen,
            summary.documents_submitted,
            summary.skipped_count,
            len(summary.failed_pages),
        )

    def run_aborted(
        self, summary: RunSummary, page_num: int, error: Exception
    ) -> None:
        self._logger.bind(
            page=page_num, cursor=summary.cursor, prefix=summary.prefix
        ).error(
            "Run aborted at page {} (cursor: {}): {}",
            page_num,
            summary.cursor or "initial",
            error,
        )


class PaginationDriver:
    """
    Drives a listing -> classification -> submission run over a key prefix.

    Pages are processed strictly one at a time: a page is listed, every key is
    classified, and the resulting batch (possibly empty) is submitted before
    the next page is requested. There is no retry and no checkpointing; an
    aborted run is restarted from the beginning or from ``summary.cursor``.
    """

    def __init__(
        self,
        key_source: KeySource,
        classifier: KeyClassifier,
        sink: BatchSink,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        on_submit_failure: SubmissionFailurePolicy = "abort",
        driver_logger: DriverLogger | None = None,
    ) -> None:
        """
        Initialize the driver.

        Args:
            key_source: Paged key listing (e.g. S3KeyLister)
            classifier: Classifier applied to every listed key
            sink: Receives one batch per page (e.g. BackfillClient)
            page_size: Maximum keys per listing page (1-1000)
            on_submit_failure: "abort" stops the run on the first rejected
                batch; "continue" records the page and moves on
            driver_logger: Logger for run progress
        """
        if not 1 <= page_size <= MAX_KEYS_LIMIT:
            raise ValueError(f"page_size must be between 1 and {MAX_KEYS_LIMIT}")
        if on_submit_failure not in ("abort", "continue"):
            raise ValueError("on_submit_failure must be 'abort' or 'continue'")

        self._key_source = key_source
        self._classifier = classifier
        self._sink = sink
        self._page_size = page_size
        self._on_submit_failure = on_submit_failure
        self._logger = driver_logger or DriverLogger()

    def run(self, prefix: str, *, start_cursor: str | None = None) -> RunSummary:
        """
        Run the migration for every key under ``prefix``.

        Args:
            prefix: Key prefix to list
            start_cursor: Continuation token to resume from (None starts at the
                beginning of the listing)

        Returns:
            RunSummary in state DONE

        Raises:
            MigrationAbortedError: On a listing failure, or a submission
                failure under the "abort" policy. The error carries the
                summary in state ABORTED.
        """
        summary = RunSummary(prefix=prefix, cursor=start_cursor)
        self._logger.run_start(prefix, self._page_size, start_cursor)

        while True:
            summary.state = RunState.LISTING
            page_num = summary.pages_listed + 1
            self._logger.fetch_start(page_num, summary.cursor)
            page = self._fetch_page(summary, page_num)
            summary.pages_listed = page_num
            summary.keys_seen += len(page.keys)

            summary.state = RunState.CLASSIFYING
            batch = self._classifier.classify_many(page.keys)
            summary.record_skips(batch.skipped)
            self._logger.page_classified(
                page_num, len(page.keys), len(batch.documents), batch.skipped_count
            )

            summary.state = RunState.SUBMITTING
            try:
                self._sink.submit_batch(batch.documents)
            except BackfillClientError as e:
                if self._on_submit_failure == "abort":
                    self._abort(summary, page_num, e)
                summary.failed_pages.append(
                    FailedPage(
                        page_number=page_num,
                        cursor=summary.cursor,
                        document_count=len(batch.documents),
                        error=str(e),
                    )
                )
                self._logger.page_failed_continuing(page_num, e)
            else:
                summary.documents_submitted += len(batch.documents)
                self._logger.page_submitted(page_num, len(batch.documents))

            if not page.is_truncated:
                summary.state = RunState.DONE
                self._logger.run_complete(summary)
                return summary

            self._logger.more_pages()
            summary.cursor = page.next_continuation_token

    def _fetch_page(self, summary: RunSummary, page_num: int) -> KeyPage:
        try:
            page = self._key_source.list_page(
                prefix=summary.prefix,
                max_keys=self._page_size,
                continuation_token=summary.cursor,
            )
        except S3StorageError as e:
            self._abort(summary, page_num, e)

        if page.is_truncated and not page.next_continuation_token:
            self._abort(
                summary,
                page_num,
                S3StorageError("Listing is truncated but has no continuation token"),
            )
        return page

    def _abort(
        self, summary: RunSummary, page_num: int, error: Exception
    ) -> NoReturn:
        summary.state = RunState.ABORTED
        self._logger.run_aborted(summary, page_num, error)
        raise MigrationAbortedError(
            f"Migration of {summary.prefix!r} aborted: {error}", summary=summary
        ) from error
