"""Address parsing and resolution using the system resolver and dnspython."""

import ipaddress
import socket
from typing import TYPE_CHECKING, ClassVar, NoReturn, cast

import dns.exception
import dns.resolver
from loguru import logger

from unwrap_relay.core.exceptions import AddressResolutionError

if TYPE_CHECKING:
    from dns.resolver import Resolver

# DNS resolver constants
DEFAULT_TIMEOUT = 1.0  # seconds
DEFAULT_LIFETIME = 3.0  # seconds
MAX_PORT = 65535


def _raise_resolution_error(msg: str) -> NoReturn:
    raise AddressResolutionError(msg)


def parse_address(value: str) -> tuple[str, int]:
    """Split a "host:port" string.

    Accepts "host:port", ":port" (all interfaces) and "[v6]:port".

    Args:
        value: Address string as given on the command line

    Returns:
        tuple[str, int]: Host (possibly empty) and port

    Raises:
        AddressResolutionError: If the string is not a valid address
    """
    host, sep, port_text = value.rpartition(":")
    if not sep:
        _raise_resolution_error(f"missing port in address {value!r}")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        _raise_resolution_error(f"too many colons in address {value!r}")

    try:
        port = int(port_text)
    except ValueError:
        _raise_resolution_error(f"invalid port in address {value!r}")
    if not 0 <= port <= MAX_PORT:
        _raise_resolution_error(f"port out of range in address {value!r}")

    return host, port


class AddressResolver:
    """Resolve relay endpoints, system DNS first, then dnspython."""

    # Shared between instances, endpoints are resolved once per process
    _resolve_cache: ClassVar[dict[str, str]] = {}

    def __init__(self, nameservers: list[str] | None = None) -> None:
        """Initialize the resolver.

        Args:
            nameservers: Nameservers for the dnspython fallback; the system
                configuration is used when omitted
        """
        try:
            self.resolver = cast("Resolver", dns.resolver.Resolver(configure=not nameservers))
        except dns.resolver.NoResolverConfiguration:
            logger.debug("No system resolver configuration, dnspython fallback disabled")
            self.resolver = cast("Resolver", dns.resolver.Resolver(configure=False))
        self.resolver.timeout = DEFAULT_TIMEOUT
        self.resolver.lifetime = DEFAULT_LIFETIME
        if nameservers:
            self.resolver.nameservers = nameservers

    def _try_system_dns(self, host: str, port: int) -> str | None:
        try:
            infos = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM)
        except socket.gaierror as e:
            logger.debug(f"System DNS resolution failed for {host}: {e}")
            return None
        for *_, sockaddr in infos:
            return str(sockaddr[0])
        return None

    def _try_configured_resolver(self, host: str) -> str | None:
        for rdtype in ("A", "AAAA"):
            try:
                answer = self.resolver.resolve(host, rdtype)
            except dns.exception.DNSException as e:
                logger.debug(f"Configured resolver failed for {host} ({rdtype}): {e}")
                continue
            return str(answer[0])
        return None

    def resolve_host(self, host: str, port: int = 0) -> str:
        """Resolve a host name to an IP address string.

        Raises:
            AddressResolutionError: If every resolution method fails
        """
        if host in self._resolve_cache:
            return self._resolve_cache[host]

        ip = self._try_system_dns(host, port) or self._try_configured_resolver(host)
        if ip is None:
            _raise_resolution_error(f"could not resolve {host}")

        self._resolve_cache[host] = ip
        return ip

    def resolve_tcp_address(self, value: str) -> tuple[str, int]:
        """Parse and resolve a "host:port" string into an (ip, port) pair.

        An empty host resolves to the empty string, meaning all interfaces.
        """
        host, port = parse_address(value)
        if not host:
            return "", port
        try:
            ipaddress.ip_address(host)
        except ValueError:
            return self.resolve_host(host, port), port
        return host, port
