"""Command-line interface for sending a one-off report from a shell."""

from __future__ import annotations

import argparse
import json
import sys
import uuid
from types import SimpleNamespace

from . import __version__
from .config import load_config
from .dns import resolve_collector
from .report import Report
from .transport import TransportResponse


# ── argument parsing ──────────────────────────────────────────────────────────

def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="lambda-report",
        description="Build an invocation report for this process and send it once.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  lambda-report --dry-run\n"
            "  lambda-report --host collector.example --path /v0/report --debug\n"
            "  lambda-report --error 'boom' --config /etc/lambda-report.yaml\n"
        ),
    )
    parser.add_argument(
        "--config", "-c",
        metavar="PATH",
        help="YAML config file (default: $LAMBDA_REPORT_CONFIG)",
    )
    parser.add_argument("--host", help="Collector hostname")
    parser.add_argument("--path", help="Collector request path")
    parser.add_argument(
        "--timeout",
        type=int,
        metavar="MS",
        help="Network timeout in milliseconds",
    )
    parser.add_argument("--client-id", metavar="TOKEN", help="Client id / token")
    parser.add_argument(
        "--function-name",
        default="lambda-report-cli",
        help="Function name recorded in the report (default: lambda-report-cli)",
    )
    parser.add_argument("--error", metavar="MESSAGE", help="Attach an error message")
    parser.add_argument(
        "--metric",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Custom metric entry; may be repeated",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Print the assembled report instead of sending it",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="Print the outgoing document and collector response",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"lambda-report {__version__}",
    )
    return parser.parse_args(argv)


def _parse_metrics(items: list[str]) -> list[dict]:
    metrics = []
    for item in items:
        name, sep, value = item.partition("=")
        if not sep or not name:
            raise ValueError(f"metric must look like NAME=VALUE, got {item!r}")
        try:
            parsed: object = int(value)
        except ValueError:
            try:
                parsed = float(value)
            except ValueError:
                parsed = value
        key = "n" if isinstance(parsed, (int, float)) else "s"
        metrics.append({"name": name, key: parsed})
    return metrics


def _cli_context(function_name: str) -> SimpleNamespace:
    return SimpleNamespace(
        function_name=function_name,
        function_version="$LATEST",
        aws_request_id=str(uuid.uuid4()),
        invoked_function_arn=None,
        log_group_name=None,
        log_stream_name=None,
        memory_limit_in_mb=None,
    )


def _print_report(document: dict, config, address=None) -> TransportResponse:
    """Stand-in sender for --dry-run: print the document, deliver nothing."""
    print(json.dumps(document, indent=2, default=str))
    return TransportResponse(status_code=0, body="")


# ── main entry point ──────────────────────────────────────────────────────────

def run(argv=None) -> None:
    args = parse_args(argv)

    try:
        config = load_config(
            args.config,
            overrides={
                "host": args.host,
                "path": args.path,
                "network_timeout": args.timeout,
                "client_id": args.client_id,
                "debug": args.debug,
                "install_method": "cli",
            },
        )
        metrics = _parse_metrics(args.metric)
    except (OSError, ValueError) as exc:
        print(f"[error] {exc}", file=sys.stderr)
        sys.exit(1)

    context = _cli_context(args.function_name)

    if args.dry_run:
        config = config.model_copy(update={"enabled": True})
        report = Report(config, context, metrics=metrics, sender=_print_report)
        report.send(args.error).result()
        return

    print(f"[lambda-report] Sending report to {config.host}{config.path}...")
    dns_future = resolve_collector(config.host)
    report = Report(config, context, metrics=metrics, dns_future=dns_future)
    report.send(args.error).result()
    print(f"[lambda-report] Done. duration={report.report['duration']}ns")
