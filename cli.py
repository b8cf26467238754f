"""
Command-line interface for the Akka cluster exporter: serve, collect once, validate config.
"""
from __future__ import annotations

import argparse
import json
import sys

import config
from config import EXPORTER_NAME, VERSION
from errors import ConfigurationError
from metrics import AkkaClusterExporter
from utils import get_logger, parse_duration, parse_listen_address, setup_logging

logger = get_logger(EXPORTER_NAME)


def _setting(args: argparse.Namespace, attr: str, key: str) -> str:
    value = getattr(args, attr, None)
    return str(value) if value else str(config.get(key))


def _prepare(args: argparse.Namespace) -> None:
    if args.config:
        config.load_config_file(args.config)
    else:
        config.load_config_file()
    level = args.log_level or config.get("logging.level", "INFO")
    setup_logging(level=level, log_file=config.get("logging.file"))


def _build_exporter(args: argparse.Namespace) -> AkkaClusterExporter:
    uri = _setting(args, "scrape_uri", "akka.scrape_uri")
    timeout = parse_duration(_setting(args, "timeout", "akka.timeout"))
    return AkkaClusterExporter.from_uri(uri, timeout)


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from api import build_registry, create_app

    logger.info("Starting %s, version %s", EXPORTER_NAME, VERSION)
    try:
        exporter = _build_exporter(args)
        host, port = parse_listen_address(_setting(args, "listen_address", "web.listen_address"))
    except ConfigurationError as e:
        logger.critical("%s", e)
        return 1
    path = _setting(args, "telemetry_path", "web.telemetry_path")
    app = create_app(build_registry(exporter), telemetry_path=path)
    logger.info("Listening on %s:%d", host, port)
    level = (args.log_level or str(config.get("logging.level", "INFO"))).lower()
    uvicorn.run(app, host=host, port=port, log_level=level)
    return 0


def cmd_collect(args: argparse.Namespace) -> int:
    try:
        exporter = _build_exporter(args)
    except ConfigurationError as e:
        logger.critical("%s", e)
        return 1
    up, counts = exporter.collect_state()
    if args.json:
        out = {"up": up, "members": counts}
        if exporter.last_error:
            out["error"] = exporter.last_error
        print(json.dumps(out, indent=2 if args.pretty else None))
        return 0 if up else 1

    from rich.console import Console
    from rich.table import Table

    console = Console()
    table = Table(title="Akka cluster members")
    table.add_column("Status", style="cyan")
    table.add_column("Count", style="green", justify="right")
    for status, n in counts.items():
        table.add_row(status, str(n))
    console.print(table)
    state = "[green]up[/green]" if up else "[red]down[/red]"
    console.print(f"Endpoint {_setting(args, 'scrape_uri', 'akka.scrape_uri')}: {state}")
    if exporter.last_error:
        console.print(f"[yellow]{exporter.last_error}[/yellow]")
    return 0 if up else 1


def cmd_validate_config(args: argparse.Namespace) -> int:
    ok = True
    for attr, key in [
        ("listen_address", "web.listen_address"),
        ("telemetry_path", "web.telemetry_path"),
        ("scrape_uri", "akka.scrape_uri"),
        ("timeout", "akka.timeout"),
        ("log_level", "logging.level"),
    ]:
        print(f"  {key}: {_setting(args, attr, key)}")
    try:
        _build_exporter(args)
        parse_listen_address(_setting(args, "listen_address", "web.listen_address"))
    except ConfigurationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        ok = False
    return 0 if ok else 1


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", default=None, help="YAML config file")
    common.add_argument("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ...)")
    common.add_argument("--akka.scrape-uri", dest="scrape_uri", default=None,
                        help="URI on which to scrape Akka HTTP Endpoint.")
    common.add_argument("--akka.timeout", dest="timeout", default=None,
                        help="Timeout for trying to get stats from Akka HTTP Endpoint (e.g. 5s).")

    parser = argparse.ArgumentParser(prog=EXPORTER_NAME, description="Akka Cluster HTTP Management Exporter")
    parser.add_argument("--version", action="version", version=f"{EXPORTER_NAME}, version {VERSION}")
    sub = parser.add_subparsers(dest="command", required=True)

    p_serve = sub.add_parser("serve", parents=[common], help="Run the exporter HTTP server")
    p_serve.add_argument("--web.listen-address", dest="listen_address", default=None,
                         help="Address to listen on for web interface and telemetry.")
    p_serve.add_argument("--web.telemetry-path", dest="telemetry_path", default=None,
                         help="Path under which to expose metrics.")
    p_serve.set_defaults(run=cmd_serve)

    p_collect = sub.add_parser("collect", parents=[common], help="Scrape the endpoint once and print counts")
    p_collect.add_argument("--json", action="store_true", help="Output JSON")
    p_collect.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    p_collect.set_defaults(run=cmd_collect)

    p_validate = sub.add_parser("validate-config", parents=[common], help="Validate and show config")
    p_validate.add_argument("--web.listen-address", dest="listen_address", default=None)
    p_validate.set_defaults(run=cmd_validate_config)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _prepare(args)
    return args.run(args)


if __name__ == "__main__":
    sys.exit(main())
