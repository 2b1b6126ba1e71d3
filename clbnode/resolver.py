from __future__ import annotations

import logging
import socket
from collections.abc import Callable, Mapping, Sequence
from typing import Any

import psutil

from .errors import AddressResolutionError
from .settings import Settings

logger = logging.getLogger(__name__)

InterfaceLister = Callable[[], Mapping[str, Sequence[Any]]]


def _ip_only(addr: str) -> str:
    # psutil may report "a.b.c.d" or, on some platforms, a "/prefix" suffix.
    return addr.split("/", 1)[0]


def _list_interfaces(interfaces: InterfaceLister) -> Mapping[str, Sequence[Any]]:
    try:
        return interfaces()
    except (OSError, psutil.Error) as exc:
        raise AddressResolutionError(f"Unable to enumerate network interfaces: {exc}") from exc


def resolve_address(
    explicit_ip: str | None,
    settings: Settings,
    interfaces: InterfaceLister = psutil.net_if_addrs,
) -> str:
    """Determine which IP address represents this machine.

    In order:
      * the explicit --ip value
      * ServiceNet: $RAX_SERVICENET_IPV4
      * PublicNet: $RAX_PUBLICNET_IPV4
      * the first 10.x address on any interface (likely ServiceNet)
      * the first IPv4 address on eth0
    """
    if explicit_ip:
        logger.info("Using explicit address %s", explicit_ip)
        return explicit_ip
    if settings.servicenet_ipv4:
        logger.info("Using ServiceNet address %s", settings.servicenet_ipv4)
        return settings.servicenet_ipv4
    if settings.publicnet_ipv4:
        logger.info("Using PublicNet address %s", settings.publicnet_ipv4)
        return settings.publicnet_ipv4

    by_name = _list_interfaces(interfaces)

    for name, addrs in by_name.items():
        for addr in addrs:
            ip = _ip_only(addr.address)
            if ip.startswith("10."):
                logger.info("Using 10.x address %s from interface %s", ip, name)
                return ip

    eth0 = by_name.get("eth0")
    if eth0 is None:
        raise AddressResolutionError("No 10.x address found and trouble finding eth0")
    for addr in eth0:
        if addr.family == socket.AF_INET:
            ip = _ip_only(addr.address)
            logger.info("Using eth0 address %s", ip)
            return ip

    raise AddressResolutionError("No IP found")
