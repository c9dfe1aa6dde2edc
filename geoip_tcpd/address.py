"""Peer address decoding

Country databases only know IPv4, so every peer address is reduced to the
IPv4 addresses it carries: the address itself for IPv4 peers, or the ones
embedded by IPv6 transition mechanisms (Teredo, IPv4-mapped,
IPv4-compatible, 6to4).  Native IPv6 peers yield nothing and pass unchecked.
"""
import logging
import socket
import typing
from ipaddress import IPv4Address
from ipaddress import IPv6Address
from ipaddress import ip_address

__all__ = (
    'AddressDecodeError',
    'STDIN_FILENO',
    'get_peer_name',
    'decode_as_ipv4',
    'decode_as_ipv6',
    'embedded_ipv4',
    'candidates_for',
)

logger = logging.getLogger('geoip_tcpd.address')

STDIN_FILENO = 0

INET_FAMILIES = (socket.AF_INET, socket.AF_INET6)

IPV4_COMPATIBLE_EXCLUDED = (
    0,  # ::
    1,  # ::1
)


class AddressDecodeError(Exception):
    pass


def get_peer_name(fileno: int = STDIN_FILENO):
    """Raw peer name of the connected socket behind ``fileno``

    The descriptor stays open, it belongs to the program we hand off to.
    """
    try:
        sock = socket.socket(fileno=fileno)
    except OSError as exc:
        raise AddressDecodeError(f'fd {fileno} is not a socket: {exc.strerror}') from exc

    try:
        if sock.family not in INET_FAMILIES:
            # AF_UNIX names can be any bytes, even 4 or 16 of them
            raise AddressDecodeError(f'fd {fileno} is not an IPv4 or IPv6 socket: {sock.family!r}')
        return sock.getpeername()
    except OSError as exc:
        raise AddressDecodeError(f'No peer for fd {fileno}: {exc.strerror}') from exc
    finally:
        sock.detach()


def _parse(raw):
    # getpeername() gives (host, port) or (host, port, flowinfo, scope_id)
    if isinstance(raw, tuple):
        raw = raw[0] if raw else None

    if isinstance(raw, (bytearray, memoryview)):
        raw = bytes(raw)

    if not isinstance(raw, (str, bytes, IPv4Address, IPv6Address)):
        return None

    try:
        return ip_address(raw)
    except ValueError:
        return None


def decode_as_ipv4(raw) -> typing.Optional[IPv4Address]:
    address = _parse(raw)
    return address if isinstance(address, IPv4Address) else None


def decode_as_ipv6(raw) -> typing.Optional[IPv6Address]:
    address = _parse(raw)
    return address if isinstance(address, IPv6Address) else None


def _ipv4_compatible(address: IPv6Address) -> typing.Optional[IPv4Address]:
    """Deprecated ``::a.b.c.d`` form (RFC 4291, 2.5.5.1)"""
    value = int(address)
    if value >> 32 or value in IPV4_COMPATIBLE_EXCLUDED:
        return None
    return IPv4Address(value)


def embedded_ipv4(address: IPv6Address) -> typing.List[IPv4Address]:
    # prefixes are disjoint, at most one rule fires
    if address.teredo is not None:
        # check both the Teredo server and the NAT (client) side
        server, client = address.teredo
        return [server, client]

    if address.ipv4_mapped is not None:
        return [address.ipv4_mapped]

    compatible = _ipv4_compatible(address)
    if compatible is not None:
        return [compatible]

    if address.sixtofour is not None:
        return [address.sixtofour]

    return []


def candidates_for(raw) -> typing.List[IPv4Address]:
    """IPv4 addresses to check against the blacklist for a raw peer address"""
    ipv4 = decode_as_ipv4(raw)
    if ipv4 is not None:
        return [ipv4]

    ipv6 = decode_as_ipv6(raw)
    if ipv6 is None:
        logger.debug('Peer address is neither IPv4 nor IPv6: %r', raw)
        return []

    candidates = embedded_ipv4(ipv6)
    if not candidates:
        logger.debug('No IPv4 address embedded in %s', ipv6)
    return candidates
