from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Mapping

from clbnode.client import CloudLoadBalancerClient
from clbnode.errors import (
    AddressResolutionError,
    ConfigurationError,
    InvariantViolation,
    ReconcileError,
    RemoteError,
)
from clbnode.reconciler import Reconciler
from clbnode.resolver import resolve_address
from clbnode.runtime import DesiredState, Endpoint
from clbnode.settings import Settings

logger = logging.getLogger("clbnode")

_FAILURE_LABELS = (
    (ConfigurationError, "Invalid configuration"),
    (AddressResolutionError, "Unable to determine IP address"),
    (InvariantViolation, "Load balancer returned an inconsistent result"),
    (RemoteError, "Load balancer request failed"),
)


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(stream=sys.stderr, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(getattr(logging, level.upper(), logging.INFO))


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description="Register this machine (or --ip) on a Cloud Load Balancer, or change/remove its node"
    )
    p.add_argument("--disable", action="store_true", help="Disable the node on the load balancer")
    p.add_argument("--drain", action="store_true", help="Drain the node from the load balancer")
    p.add_argument("--delete", action="store_true", help="Delete the node from the load balancer (wins over others)")
    p.add_argument("--ip", default="", help="IP address to register/deregister on the load balancer")
    p.add_argument("--interval", type=int, default=5, help="Seconds to wait between each modification attempt")
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p


def run(args: argparse.Namespace, environ: Mapping[str, str] | None = None) -> str:
    """Execute one reconciliation and return the final node state text."""
    if args.interval < 0:
        raise ConfigurationError(f"--interval must not be negative, got {args.interval}")

    settings = Settings.from_env(environ)
    address = resolve_address(args.ip, settings)
    endpoint = Endpoint(address, settings.app_port)
    desired = DesiredState.from_flags(disable=args.disable, drain=args.drain, delete=args.delete)

    logger.info("Setting %s to be %s on load balancer %s", endpoint, desired, settings.load_balancer_id)

    with CloudLoadBalancerClient.authenticate(settings) as client:
        reconciler = Reconciler(
            client,
            interval_s=args.interval,
            ready_timeout_s=settings.ready_timeout_s,
            ready_poll_s=settings.ready_poll_s,
        )
        result = reconciler.reconcile(settings.load_balancer_id, endpoint, desired)
    return result.describe()


def main(argv: list[str] | None = None, environ: Mapping[str, str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        final = run(args, environ)
    except ReconcileError as e:
        label = next((text for kind, text in _FAILURE_LABELS if isinstance(e, kind)), "Reconciliation failed")
        logger.error("%s: %s", label, e)
        return 1

    logger.info("Final node state: %s", final)
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
