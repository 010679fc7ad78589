import argparse
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from uuid import UUID

from cms_versioning.adapters.clock import SystemClock
from cms_versioning.adapters.sqlite.migrator import SQLiteMigrator
from cms_versioning.adapters.sqlite.repos import SQLiteBlockRepo, SQLiteVersionRepo
from cms_versioning.app_shell.config import configure_logging, validate_ops_rules
from cms_versioning.components.diff import DiffVersionsInput, run_diff
from cms_versioning.components.publish import PublishVersionInput, run_publish
from cms_versioning.components.scheduler import ProcessDueInput, run_process_due
from cms_versioning.components.versions import ListVersionsInput, run_list
from cms_versioning.rules.loader import DEFAULT_RULES_PATH, load_rules
from cms_versioning.rules.models import Rules

logger = logging.getLogger("cli")

DEFAULT_DATA_DIR = "./data"


@dataclass
class CliContext:
    rules: Rules
    db_path: str
    versions: SQLiteVersionRepo
    blocks: SQLiteBlockRepo
    clock: SystemClock

    @classmethod
    def create(cls, data_dir: Path, rules_path: Path) -> "CliContext":
        if not rules_path.exists():
            logger.error("Rules file %s not found.", rules_path)
            sys.exit(1)

        rules = load_rules(rules_path)
        db_path = str(data_dir / "cms.db")
        return cls(
            rules=rules,
            db_path=db_path,
            versions=SQLiteVersionRepo(db_path),
            blocks=SQLiteBlockRepo(db_path),
            clock=SystemClock(),
        )


def handle_migrate(ctx: CliContext, args: argparse.Namespace) -> None:
    applied = SQLiteMigrator(ctx.db_path).run_migrations()
    print(f"Applied {len(applied)} migration(s).")


def handle_publish_due(ctx: CliContext, args: argparse.Namespace) -> None:
    result = run_process_due(
        ProcessDueInput(max_versions=ctx.rules.scheduling.max_versions_per_scan),
        repo=ctx.versions,
        time=ctx.clock,
    )
    if result.errors:
        logger.error("Scan failed: %s", result.errors[0].message)
        sys.exit(1)

    print(f"Published {len(result.published)} version(s).")
    for failure in result.failures:
        print(f" ! {failure.version_id}: {failure.code} ({failure.message})")
    if not result.success:
        sys.exit(1)


def handle_versions(ctx: CliContext, args: argparse.Namespace) -> None:
    result = run_list(ListVersionsInput(), repo=ctx.versions)
    if not result.success:
        logger.error("Listing failed: %s", result.errors[0].message)
        sys.exit(1)
    if not result.versions:
        print("No versions.")
        return

    for v in result.versions:
        when = v.published_at or v.scheduled_publish_at or v.created_at
        print(
            f"#{v.sequence_number:<4} {v.status:<9} {v.id} "
            f"{v.content_block_count:>4} blocks  {when.isoformat()}  {v.notes or ''}"
        )


def handle_publish(ctx: CliContext, args: argparse.Namespace) -> None:
    result = run_publish(
        PublishVersionInput(version_id=args.version_id, actor=args.actor),
        repo=ctx.versions,
        time=ctx.clock,
    )
    if not result.success or result.version is None:
        logger.error("Publish failed: %s", result.errors[0].message)
        sys.exit(1)
    print(f"Published version #{result.version.sequence_number} ({result.version.id}).")


def handle_diff(ctx: CliContext, args: argparse.Namespace) -> None:
    result = run_diff(
        DiffVersionsInput(
            target_version_id=args.version_id,
            base_version_id=args.against,
            language=args.language or ctx.rules.content.default_language,
        ),
        versions=ctx.versions,
        blocks=ctx.blocks,
    )
    if not result.success or result.comparison is None:
        logger.error("Diff failed: %s", result.errors[0].message)
        sys.exit(1)

    comparison = result.comparison
    if not comparison.has_changes:
        print("No changes.")
        return

    markers = {"added": "+", "removed": "-", "modified": "~", "unchanged": " "}
    for section in comparison.sections:
        print(f"[{section.section_key}]")
        for block in section.blocks:
            print(f"  {markers[block.status]} {block.block_key} ({block.language})")
    print(
        f"{comparison.total_added} added, {comparison.total_removed} removed, "
        f"{comparison.total_modified} modified"
    )


def handle_serve(ctx: CliContext, args: argparse.Namespace) -> None:
    import uvicorn

    # The API reads its settings from the environment
    os.environ["CMS_DATA_DIR"] = args.data_dir
    os.environ["CMS_RULES_PATH"] = args.rules
    uvicorn.run("cms_versioning.api.main:app", host=args.host, port=args.port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="CMS versioning engine CLI")
    parser.add_argument("--data-dir", default=DEFAULT_DATA_DIR, help="Directory of cms.db")
    parser.add_argument("--rules", default=str(DEFAULT_RULES_PATH), help="Rules YAML file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("migrate", help="Apply pending database migrations")
    subparsers.add_parser("publish-due", help="Publish drafts whose schedule has elapsed")
    subparsers.add_parser("versions", help="List versions, newest first")

    publish_parser = subparsers.add_parser("publish", help="Publish a draft now")
    publish_parser.add_argument("version_id", type=UUID)
    publish_parser.add_argument("--actor", default="cli", help="Actor recorded in audit fields")

    diff_parser = subparsers.add_parser("diff", help="Compare a version with another")
    diff_parser.add_argument("version_id", type=UUID)
    diff_parser.add_argument("--against", type=UUID, default=None, help="Defaults to published")
    diff_parser.add_argument("--language", default=None, help="Defaults to the rules language")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


HANDLERS = {
    "migrate": handle_migrate,
    "publish-due": handle_publish_due,
    "versions": handle_versions,
    "publish": handle_publish,
    "diff": handle_diff,
    "serve": handle_serve,
}


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    ctx = CliContext.create(Path(args.data_dir), Path(args.rules))
    configure_logging(ctx.rules)
    validate_ops_rules(ctx.rules)

    HANDLERS[args.command](ctx, args)


if __name__ == "__main__":
    main()
