from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from catalogsync.adapters.manifest import ManifestError, load_manifest
from catalogsync.app import describe_versions, repair_catalog, sync_catalog
from catalogsync.config import (
    ConfigurationError,
    GeneratorName,
    configure_logging,
    get_catalog_config,
    options_for,
    parse_document_format,
)
from catalogsync.domain.model import EntityKind, MessageType

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from catalogsync.config import CatalogConfig, ReconciliationOptions

log = logging.getLogger(__name__)


def _add_catalog_dir(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--catalog-dir",
        type=Path,
        help="Catalog root directory (defaults to $CATALOG_DIR or the working directory)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug output",
    )


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile generated entities into a catalog")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Reconcile revisions from a manifest file")
    sync.add_argument(
        "--input",
        type=Path,
        required=True,
        help="YAML or JSON manifest describing the entity revisions",
    )
    _add_catalog_dir(sync)
    sync.add_argument(
        "--generator",
        type=str,
        choices=[name.value for name in GeneratorName],
        help="Generator whose defaults apply (overrides the manifest's generator)",
    )
    versions_group = sync.add_mutually_exclusive_group()
    versions_group.add_argument(
        "--include-all-versions",
        dest="include_all_versions",
        action="store_const",
        const=True,
        help="Also write revisions the source does not mark as latest into the archive",
    )
    versions_group.add_argument(
        "--latest-only",
        dest="include_all_versions",
        action="store_const",
        const=False,
        help="Ignore revisions the source does not mark as latest",
    )
    sync.add_argument(
        "--no-preserve-messages",
        dest="preserve_existing_messages",
        action="store_const",
        const=False,
        help="Re-render message markdown instead of keeping the catalogued text",
    )
    sync.add_argument(
        "--forward-only",
        action="store_const",
        const=True,
        help="Treat newer revisions as the new current version even if not marked latest",
    )
    sync.add_argument(
        "--format",
        type=str,
        choices=["md", "mdx"],
        help="Document format for new entities (defaults to $CATALOG_DOCUMENT_FORMAT or md)",
    )

    repair = subparsers.add_parser(
        "repair",
        help="Recover interrupted writes and entities left without a current version",
    )
    _add_catalog_dir(repair)

    versions = subparsers.add_parser("versions", help="Show the versions of one entity")
    versions.add_argument("kind", type=str, choices=[kind.value for kind in EntityKind])
    versions.add_argument("id", type=str)
    versions.add_argument(
        "--message-type",
        type=str,
        choices=[message_type.value for message_type in MessageType],
        help="Message type (required for messages)",
    )
    _add_catalog_dir(versions)

    return parser.parse_args(list(argv))


def _build_config(args: argparse.Namespace) -> CatalogConfig:
    config = get_catalog_config(root=args.catalog_dir)
    document_format = getattr(args, "format", None)
    if document_format:
        config = replace(config, document_format=parse_document_format(document_format))
    return config


def _build_options(
    args: argparse.Namespace,
    manifest_generator: str | None,
) -> ReconciliationOptions:
    return options_for(
        args.generator or manifest_generator or GeneratorName.MANUAL,
        include_all_versions=args.include_all_versions,
        preserve_existing_messages=args.preserve_existing_messages,
        forward_only=args.forward_only,
    )


def _run_sync(args: argparse.Namespace, config: CatalogConfig) -> int:
    manifest = load_manifest(args.input)
    options = _build_options(args, manifest.generator)
    report = sync_catalog(manifest.revisions, config=config, options=options)
    for outcome in report.failures:
        log.error(
            "Failed: %s %s@%s (%s): %s",
            outcome.key.kind,
            outcome.key.id,
            outcome.version,
            outcome.error_kind,
            outcome.error,
        )
    return 1 if report.failed else 0


def _run_repair(config: CatalogConfig) -> int:
    report = repair_catalog(config=config)
    for key in report.recovered:
        log.info("Recovered interrupted write: %s", key)
    for key, version in report.restored:
        log.info("Restored %s to version %s", key, version)
    return 1 if report.failed else 0


def _run_versions(args: argparse.Namespace, config: CatalogConfig) -> int:
    kind = EntityKind(args.kind)
    message_type = MessageType(args.message_type) if args.message_type else None
    if kind is EntityKind.MESSAGE and message_type is None:
        raise ValueError("--message-type is required for messages")
    if kind is not EntityKind.MESSAGE and message_type is not None:
        raise ValueError("--message-type only applies to messages")
    listing = describe_versions(kind, args.id, message_type=message_type, config=config)
    log.info("%s current version: %s", listing.key, listing.current or "(none)")
    log.info("%s archived versions: %s", listing.key, ", ".join(listing.archived) or "(none)")
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.verbose:
            configure_logging(verbose=True, force=True)
        config = _build_config(parsed_args)
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "sync":
            exit_code = _run_sync(parsed_args, config)
        elif parsed_args.command == "repair":
            exit_code = _run_repair(config)
        elif parsed_args.command == "versions":
            exit_code = _run_versions(parsed_args, config)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except (ManifestError, ConfigurationError, ValueError):
        log.exception("Invalid input")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during catalog sync")
        sys.exit(1)

    if exit_code:
        sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
