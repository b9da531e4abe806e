"""Startup configuration for dtop."""

import argparse
import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

DEFAULT_ENDPOINT = "unix:///var/run/docker.sock"
DEFAULT_HOST_VAR = "DOCKER_HOST"
DEFAULT_CERTS_VAR = "DOCKER_CERT_PATH"
DEFAULT_INTERVAL = 1.0
MIN_INTERVAL = 0.1


@dataclass(slots=True, frozen=True)
class Endpoint:
    """Where the runtime lives and how to authenticate to it."""

    url: str
    cert_path: str = ""

    @property
    def uses_tls(self) -> bool:
        return not self.url.startswith("unix")


@dataclass(slots=True, frozen=True)
class DashboardConfig:
    """Resolved configuration for one dtop run."""

    endpoint: Endpoint
    interval: float = DEFAULT_INTERVAL
    log_file: str | None = None
    log_level: str = "INFO"


def resolve_endpoint(
    environ: Mapping[str, str],
    host_var: str = DEFAULT_HOST_VAR,
    certs_var: str = DEFAULT_CERTS_VAR,
) -> Endpoint:
    """Look up the endpoint and certificate bundle in an environment mapping."""
    url = environ.get(host_var) or DEFAULT_ENDPOINT
    return Endpoint(url=url, cert_path=environ.get(certs_var, ""))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dtop",
        description="Interactive top-like dashboard for Docker containers",
    )
    parser.add_argument(
        "--host",
        default=DEFAULT_HOST_VAR,
        help="environment variable holding the docker host location "
        "(default: %(default)s)",
    )
    parser.add_argument(
        "--certs",
        default=DEFAULT_CERTS_VAR,
        help="environment variable holding the docker certs location "
        "(default: %(default)s)",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=DEFAULT_INTERVAL,
        help="refresh period in seconds (default: %(default)s)",
    )
    parser.add_argument("--log-file", help="write logs to this file")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="log level when --log-file is set (default: %(default)s)",
    )
    return parser


def load_config(
    argv: Sequence[str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> DashboardConfig:
    """Parse the command line and resolve the runtime endpoint."""
    args = build_parser().parse_args(argv)
    env = os.environ if environ is None else environ
    return DashboardConfig(
        endpoint=resolve_endpoint(env, args.host, args.certs),
        interval=max(MIN_INTERVAL, args.interval),
        log_file=args.log_file,
        log_level=args.log_level,
    )


def configure_logging(config: DashboardConfig) -> None:
    """Send log records to a file; the terminal is owned by the TUI."""
    if not config.log_file:
        logging.getLogger("dtop").addHandler(logging.NullHandler())
        return
    logging.basicConfig(
        filename=config.log_file,
        level=getattr(logging, config.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
