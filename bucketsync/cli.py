"""CLI interface for bucketsync."""

import logging
import os
from typing import Any, Optional

import click

from .config import VALID_STORAGE_CLASSES, SyncConfig
from .exceptions import SyncError
from .output import OutputFormatter
from .sync import SyncEngine

logger = logging.getLogger(__name__)


@click.group()
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--debug", is_flag=True, help="Enable debug logging output")
@click.version_option(package_name="bucketsync")
@click.pass_context
def main(ctx: Any, quiet: bool, debug: bool) -> None:
    """bucketsync - Mirror a directory onto a local path or an S3 bucket."""
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(quiet=quiet)

    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("bucketsync").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.argument("destination")
@click.option(
    "--source",
    "-s",
    envvar="SRC_DIR",
    help="Source directory or s3:// prefix (default: $SRC_DIR)",
)
@click.option("--access-key", envvar="AWS_ACCESS_KEY_ID", help="AWS Access Key")
@click.option("--secret-key", envvar="AWS_SECRET_ACCESS_KEY", help="AWS Secret Key")
@click.option("--storage-class", default="", help="S3 Storage Class")
@click.option("--concurrency", type=int, default=4, help="Parallel copy workers")
@click.option("--part-size", type=int, default=0, help="Part Size in MB")
@click.option("--check-md5", is_flag=True, help="Compare content hashes")
@click.option("--dry-run", is_flag=True, help="Show what would change")
@click.option("--verbose", "-v", is_flag=True, help="Print the plan and removals")
@click.option("--recursive/--no-recursive", default=True, help="Recursive")
@click.option("--force", is_flag=True, help="Force")
@click.option("--skip-existing", is_flag=True, help="Skip existing")
@click.option(
    "--endpoint-url",
    envvar="BUCKETSYNC_ENDPOINT_URL",
    help="Endpoint of an S3-compatible service",
)
@click.pass_context
def sync(
    ctx: Any,
    destination: str,
    source: Optional[str],
    access_key: Optional[str],
    secret_key: Optional[str],
    storage_class: str,
    concurrency: int,
    part_size: int,
    check_md5: bool,
    dry_run: bool,
    verbose: bool,
    recursive: bool,
    force: bool,
    skip_existing: bool,
    endpoint_url: Optional[str],
) -> None:
    """Sync SOURCE onto DESTINATION, removing files absent from the source.

    DESTINATION is a local path or s3://bucket/prefix. A source without a
    trailing slash is copied as a directory of the same name.

    Examples:
        bucketsync sync -s ./build/ s3://my-bucket/site
        bucketsync sync -s ./build/ s3://my-bucket --check-md5 --dry-run
    """
    out: OutputFormatter = ctx.obj["out"]

    if not source:
        out.error("Missing source: pass --source or set SRC_DIR")
        ctx.exit(1)
    if "://" not in source and not os.path.exists(source):
        out.error(f"Source directory does not exist: {source}")
        ctx.exit(1)
    if storage_class not in VALID_STORAGE_CLASSES:
        out.error(f"Invalid storage class provided: {storage_class}")
        ctx.exit(1)

    config = SyncConfig.from_env(
        access_key=access_key,
        secret_key=secret_key,
        storage_class=storage_class,
        concurrency=concurrency,
        part_size=part_size,
        check_md5=check_md5,
        dry_run=dry_run,
        verbose=verbose,
        recursive=recursive,
        force=force,
        skip_existing=skip_existing,
        endpoint_url=endpoint_url,
    )

    if dry_run:
        out.info("Dry run: No changes will be made")

    engine = SyncEngine(config, output=out)
    try:
        stats = engine.sync(source, destination)
    except SyncError as e:
        out.error(str(e))
        ctx.exit(1)

    logger.debug("Sync stats: %s", stats)
    if dry_run:
        out.success(
            f"Dry run complete: {stats.copies + stats.checksums} to copy or verify, "
            f"{stats.removes} to remove"
        )
    else:
        out.success(f"Sync complete: {stats.copied} copied, {stats.removed} removed")


if __name__ == "__main__":
    main()
