from __future__ import annotations

import dataclasses
import json

from dotenv import load_dotenv
import typer

from docbackfill.adapters.clients.backfill import BackfillDocument
from docbackfill.classification.classifier import KeyClassifier
from docbackfill.core.config import (
    MigrationConfigError,
    load_migration_config_from_env,
    validate_failure_policy,
    validate_page_size,
)
from docbackfill.core.logging import configure_logging
from docbackfill.pipeline.driver import MigrationAbortedError
from docbackfill.pipeline.factory import create_driver

# Load environment variables from .env
load_dotenv()

app = typer.Typer(
    help="Backfill legacy S3 seller document keys into the document registry.",
    no_args_is_help=True,
)


@app.command("run")
def run_cmd(
    prefix: str | None = typer.Argument(
        None, help="Key prefix to migrate (defaults to DOCBACKFILL_PREFIX)"
    ),
    page_size: int | None = typer.Option(
        None, help="Keys per listing page (defaults to DOCBACKFILL_PAGE_SIZE)"
    ),
    on_submit_failure: str | None = typer.Option(
        None, help="'abort' (default) or 'continue' when a batch is rejected"
    ),
    start_cursor: str | None = typer.Option(
        None, help="Continuation token to resume an aborted run from"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Classify and log batches without submitting them"
    ),
) -> None:
    """Backfill every document key under a prefix, one page at a time."""
    try:
        config = load_migration_config_from_env()
        overrides: dict[str, object] = {}
        if prefix is not None:
            overrides["prefix"] = prefix
        if page_size is not None:
            overrides["page_size"] = validate_page_size(page_size)
        if on_submit_failure is not None:
            overrides["on_submit_failure"] = validate_failure_policy(on_submit_failure)
        config = dataclasses.replace(config, **overrides)
    except MigrationConfigError as e:
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(code=2) from e

    configure_logging(config.log_level)
    driver = create_driver(config=config, dry_run=dry_run)

    try:
        summary = driver.run(config.prefix, start_cursor=start_cursor)
    except MigrationAbortedError as e:
        typer.echo(f"ERROR: {e}", err=True)
        if e.summary.cursor:
            typer.echo(f"Resume with: --start-cursor {e.summary.cursor}", err=True)
        raise typer.Exit(code=1) from e

    typer.echo(
        f"Done: {summary.pages_listed} pages, {summary.keys_seen} keys, "
        f"{summary.documents_submitted} documents submitted, "
        f"{summary.skipped_count} skipped, {len(summary.failed_pages)} failed pages"
    )
    if summary.failed_pages:
        raise typer.Exit(code=1)


@app.command("classify")
def classify_cmd(
    keys: list[str] = typer.Argument(..., help="Storage keys to classify"),
) -> None:
    """Print the document each key would be backfilled as, one JSON per line."""
    classifier = KeyClassifier()
    for key in keys:
        result = classifier.classify(key)
        if result.document is not None:
            payload = BackfillDocument.from_document(result.document).model_dump(
                exclude_none=True
            )
            typer.echo(json.dumps(payload))
        else:
            reason = result.skip_reason.value if result.skip_reason else "skipped"
            typer.echo(json.dumps({"s3_key": key, "skipped": reason}))


if __name__ == "__main__":
    app()
