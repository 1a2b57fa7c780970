from __future__ import annotations

from docbackfill.adapters.clients.backfill import BackfillClient, DryRunSubmitter
from docbackfill.adapters.storage.s3 import S3Config, S3KeyLister
from docbackfill.classification.classifier import KeyClassifier
from docbackfill.core.config import MigrationConfig
from docbackfill.pipeline.driver import PaginationDriver
from docbackfill.pipeline.protocol import BatchSink


def create_driver(
    *,
    config: MigrationConfig,
    dry_run: bool = False,
) -> PaginationDriver:
    """Wire the S3 lister, classifier and backfill sink from startup config."""
    key_source = S3KeyLister(S3Config(bucket=config.bucket, region=config.region))

    sink: BatchSink
    if dry_run:
        sink = DryRunSubmitter()
    else:
        sink = BackfillClient(
            host=config.backfill_host,
            path=config.backfill_path,
            timeout_seconds=config.timeout_seconds,
        )

    return PaginationDriver(
        key_source,
        KeyClassifier(),
        sink,
        page_size=config.page_size,
        on_submit_failure=config.on_submit_failure,
    )
