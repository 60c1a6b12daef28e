"""Command-line interface for the Cash Flow Tracker.

Usage:
  python -m cashflow_tracker.cli init-db
  python -m cashflow_tracker.cli report --user alice --search salary
  python -m cashflow_tracker.cli import --user alice data/cash_flows.csv

Reports and imports go through the same service the web app uses, so
ownership and validation rules are identical.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from flask import Flask

from .data_loader import load_csv_files
from .models import User, db
from .reports import build_summary, export_cash_flows_csv, export_summary_json, format_text_report
from .service import CashFlowService
from .webapp import create_app


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Cash Flow Tracker")
    p.add_argument("--config", "-c", help="Path to JSON config")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create database tables")

    report = sub.add_parser("report", help="Print a user's cash flow summary")
    report.add_argument("--user", "-u", required=True, help="Username to report on")
    report.add_argument("--search", "-s", help="Only include matching cash flows")
    report.add_argument("--json", dest="json_out", help="Write summary JSON to path")
    report.add_argument("--csv", dest="csv_out", help="Write cash flows CSV to path")

    imp = sub.add_parser("import", help="Import cash flows from CSV file(s)")
    imp.add_argument("--user", "-u", required=True, help="Username that will own the imported rows")
    imp.add_argument("inputs", nargs="+", help="CSV file(s) to load")
    return p.parse_args(argv)


def _find_user(username: str) -> Optional[User]:
    return db.session.execute(db.select(User).where(User.username == username)).scalar_one_or_none()


def _report(app: Flask, args: argparse.Namespace) -> int:
    with app.app_context():
        user = _find_user(args.user)
        if user is None:
            print(f"Unknown user: {args.user}", file=sys.stderr)
            return 1
        cash_flows = CashFlowService().list(user.id, args.search)
        summary = build_summary(cash_flows)
        print(format_text_report(summary))
        if args.json_out:
            export_summary_json(summary, args.json_out)
            print(f"\nSaved JSON summary to: {args.json_out}")
        if args.csv_out:
            export_cash_flows_csv(cash_flows, args.csv_out)
            print(f"Saved cash flows CSV to: {args.csv_out}")
    return 0


def _import(app: Flask, args: argparse.Namespace) -> int:
    try:
        drafts = load_csv_files(args.inputs)
    except (OSError, ValueError) as exc:
        print(f"Import failed: {exc}", file=sys.stderr)
        return 1
    with app.app_context():
        user = _find_user(args.user)
        if user is None:
            print(f"Unknown user: {args.user}", file=sys.stderr)
            return 1
        service = CashFlowService()
        for draft in drafts:
            service.create(user.id, draft.type, draft.source, draft.label, draft.amount, draft.description)
    print(f"Imported {len(drafts)} cash flow(s) for {args.user}")
    return 0


def main(argv: Optional[List[str]] = None, app: Optional[Flask] = None) -> int:
    args = parse_args(argv)
    # create_app creates missing tables, which is all init-db needs.
    app = app or create_app(args.config)
    if args.command == "init-db":
        print(f"Database ready at {app.config['SQLALCHEMY_DATABASE_URI']}")
        return 0
    if args.command == "report":
        return _report(app, args)
    return _import(app, args)


if __name__ == "__main__":
    raise SystemExit(main())
