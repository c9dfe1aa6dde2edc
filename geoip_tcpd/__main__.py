import logging
import typing

from . import config
from .address import AddressDecodeError
from .address import candidates_for
from .address import get_peer_name
from .decision import Decision
from .decision import decide
from .denylist import load
from .handoff import EXIT_DENIED
from .handoff import exec_program
from .resolver import GeoIPResolver

logger = logging.getLogger('geoip_tcpd')


def peer_candidates():
    try:
        peer = get_peer_name()
    except AddressDecodeError as exc:
        logger.warning('%s, passing connection through unchecked', exc)
        return []

    return candidates_for(peer)


def run(blacklist, geoip_db, program: str, args: typing.Sequence[str]) -> int:
    denylist = load(blacklist)

    with GeoIPResolver.open(geoip_db) as resolver:
        decision = decide(peer_candidates(), denylist, resolver)

    if decision is Decision.DENY:
        return EXIT_DENIED

    logger.debug('Connection allowed, handing off to %s', program)
    config.teardown()
    return exec_program(program, args)


if __name__ == '__main__':
    from .cli import geoip_tcpd

    geoip_tcpd(prog_name='geoip-tcpd')
