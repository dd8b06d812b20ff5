#!/usr/bin/env python3
"""
Operator command line for plant-ops.

Usage:
    python3 scripts/plant_ops.py init-db
    python3 scripts/plant_ops.py payroll-export --start 2024-01-07 --end 2024-01-13 --format xlsx
    python3 scripts/plant_ops.py blockers --date 2024-01-15
    python3 scripts/plant_ops.py close-day --date 2024-01-15 --actor <uuid>
    python3 scripts/plant_ops.py pallet --length 16 --width 12 --pallet-type EURO
    python3 scripts/plant_ops.py qa-evidence --test-id <uuid> --file pH.jpg
    python3 scripts/plant_ops.py template-upload --template-id <uuid> --file bol.docx --actor <uuid>

The database URL and plant settings come from the active configuration
(``PLANT_OPS_CONFIG`` or the bundled default).  ``--config`` overrides both.
"""

import argparse
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path
from uuid import UUID

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from plant_config import get_active_config  # noqa: E402
from plant_engines.pallet import PalletType, recommend_arrangements  # noqa: E402
from plant_kernel.db.engine import create_tables, init_engine_from_url, session_scope  # noqa: E402
from plant_kernel.exceptions import PlantOpsError  # noqa: E402
from plant_kernel.logging_config import configure_logging, get_logger  # noqa: E402

logger = get_logger("scripts.plant_ops")


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from exc


def _init_db(config) -> None:
    init_engine_from_url(
        config.database.url,
        echo=config.database.echo,
        pool_size=config.database.pool_size,
        max_overflow=config.database.max_overflow,
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_init_db(args, config) -> int:
    _init_db(config)
    create_tables()
    print(f"  Tables created at {config.database.url}")
    return 0


def cmd_payroll_export(args, config) -> int:
    from plant_modules.hr.service import HRService

    _init_db(config)
    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)
    with session_scope() as session:
        service = HRService(
            session,
            daily_regular_hours=config.payroll.daily_regular_hours,
            overtime_multiplier=config.payroll.overtime_multiplier,
        )
        start, end = args.start, args.end
        if start is None or end is None:
            start, end = service.default_payroll_period()
        if args.format == "xlsx":
            filename, content = service.export_payroll_xlsx(start, end)
            (out_dir / filename).write_bytes(content)
        else:
            filename, text = service.export_payroll_csv(start, end)
            (out_dir / filename).write_text(text, encoding="utf-8")
    print(f"  Wrote {out_dir / filename}")
    return 0


def cmd_blockers(args, config) -> int:
    from plant_modules.operations.models import BlockerKind
    from plant_modules.operations.service import OperationsService

    _init_db(config)
    with session_scope() as session:
        blockers = OperationsService(session).blockers(args.date)
    if blockers.can_close:
        print(f"  {args.date}: ready to close")
        return 0

    print(f"  {args.date}: {blockers.total_blockers} open transaction(s)")
    for kind in BlockerKind:
        preview = blockers.preview(kind)
        if not preview.items:
            continue
        print(f"    {kind.value}:")
        for item in preview.items:
            print(f"      {item.number:<24} {item.status}")
        if preview.overflow_label:
            print(f"      {preview.overflow_label}")
    return 1


def cmd_close_day(args, config) -> int:
    from plant_modules.operations.service import OperationsService

    _init_db(config)
    with session_scope() as session:
        closed = OperationsService(session).close_day(args.date, actor_id=args.actor, notes=args.notes)
    print(f"  Closed {closed.business_date.strftime('%B %d, %Y')}")
    return 0


def cmd_qa_evidence(args, config) -> int:
    from plant_config.bridges import build_quality_service

    source = Path(args.file)
    _init_db(config)
    with session_scope() as session:
        service = build_quality_service(session, config)
        upload = service.upload_document if args.kind == "document" else service.upload_photo
        url = upload(args.test_id, source.name, source.read_bytes())
    print(f"  Uploaded {url}")
    return 0


def cmd_template_upload(args, config) -> int:
    from plant_config.bridges import build_template_service

    source = Path(args.file)
    _init_db(config)
    with session_scope() as session:
        uploaded = build_template_service(session, config).upload_file(
            args.template_id, source.name, source.read_bytes(), args.type, args.actor,
        )
    print(f"  Uploaded {uploaded.url}")
    return 0


def cmd_pallet(args, config) -> int:
    options = recommend_arrangements(
        box_length_in=args.length,
        box_width_in=args.width,
        pallet_type=args.pallet_type,
        custom_length_in=config.packaging.custom_pallet_length_in,
        custom_width_in=config.packaging.custom_pallet_width_in,
    )
    if not options:
        print("  Box does not fit on this pallet")
        return 1
    for option in options:
        marker = "*" if option.highlight else " "
        arrangement = option.arrangement
        print(
            f"  {marker} {option.name:<16} Ti {option.ti:>3}  "
            f"{arrangement.cols}x{arrangement.rows} {arrangement.orientation.value:<10} "
            f"{option.efficiency}%"
        )
    return 0


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Plant operations command line")
    parser.add_argument("--config", help="Path to a plant config YAML file")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init-db", help="Create all tables")
    p.set_defaults(func=cmd_init_db)

    p = sub.add_parser("payroll-export", help="Export payroll for a period")
    p.add_argument("--start", type=_parse_date, help="Period start (default: last week)")
    p.add_argument("--end", type=_parse_date, help="Period end (default: last week)")
    p.add_argument("--format", choices=("csv", "xlsx"), default="csv")
    p.add_argument("--out", default=".", help="Output directory")
    p.set_defaults(func=cmd_payroll_export)

    p = sub.add_parser("blockers", help="List open transactions for a date")
    p.add_argument("--date", type=_parse_date, default=date.today())
    p.set_defaults(func=cmd_blockers)

    p = sub.add_parser("close-day", help="Close a business date")
    p.add_argument("--date", type=_parse_date, default=date.today())
    p.add_argument("--actor", type=UUID, required=True, help="Acting user ID")
    p.add_argument("--notes")
    p.set_defaults(func=cmd_close_day)

    p = sub.add_parser("qa-evidence", help="Attach a photo or document to a lot QA test")
    p.add_argument("--test-id", type=UUID, required=True)
    p.add_argument("--file", required=True)
    p.add_argument("--kind", choices=("photo", "document"), default="photo")
    p.set_defaults(func=cmd_qa_evidence)

    p = sub.add_parser("template-upload", help="Upload the file behind a document template")
    p.add_argument("--template-id", type=UUID, required=True)
    p.add_argument("--file", required=True)
    p.add_argument("--type", choices=("document", "email"), default="document")
    p.add_argument("--actor", type=UUID, required=True, help="Acting user ID")
    p.set_defaults(func=cmd_template_upload)

    p = sub.add_parser("pallet", help="Recommend pallet layer patterns for a box")
    p.add_argument("--length", type=Decimal, required=True, help="Box length (in)")
    p.add_argument("--width", type=Decimal, required=True, help="Box width (in)")
    p.add_argument(
        "--pallet-type",
        choices=[t.value for t in PalletType],
        default=PalletType.US_STANDARD.value,
    )
    p.set_defaults(func=cmd_pallet)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()
    config = get_active_config(args.config)
    try:
        return args.func(args, config)
    except PlantOpsError as exc:
        logger.error("cli_command_failed", extra={"command": args.command, "error_code": exc.code})
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
