import enum
import logging
import typing
from ipaddress import IPv4Address

from .denylist import Denylist
from .resolver import CountryResolver

__all__ = (
    'Decision',
    'decide',
)

logger = logging.getLogger('geoip_tcpd.decision')


class Decision(enum.Enum):
    ALLOW = 'allow'
    DENY = 'deny'


def decide(candidates: typing.Iterable[IPv4Address], denylist: Denylist, resolver: CountryResolver) -> Decision:
    """Deny on the first candidate whose country is blacklisted

    Candidates with no known country never block.
    """
    for candidate in candidates:
        country_code = resolver.country_of(candidate)
        if country_code is None:
            logger.debug('%s: country unknown', candidate)
            continue

        if country_code in denylist:
            logger.info('%s: country %s is blacklisted, connection denied', candidate, country_code)
            return Decision.DENY

        logger.debug('%s: country %s is allowed', candidate, country_code)

    return Decision.ALLOW
