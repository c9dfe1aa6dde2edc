"""Country-code blacklist file

One two-letter country code per line. Blank lines are allowed and
comments are started with the hash (``#``) character::

    # neighbours we don't talk to
    XX
    YY  # and these
"""
import logging
import os
import re
import typing

from .config import ConfigError

__all__ = (
    'Denylist',
    'DenylistSyntaxError',
    'load',
    'parse_lines',
)

logger = logging.getLogger('geoip_tcpd.denylist')

Denylist = typing.FrozenSet[str]

COUNTRY_CODE_RE = re.compile(r'[A-Z]{2}')


class DenylistSyntaxError(ConfigError):
    def __init__(self, filename, lineno: int):
        self.filename = filename
        self.lineno = lineno
        super().__init__(f'Syntax error on line {lineno} of {filename}.  Expected two-letter country code.')


def parse_lines(lines: typing.Iterable[str], filename='<blacklist>') -> Denylist:
    codes = set()
    for lineno, line in enumerate(lines, start=1):
        line = line.partition('#')[0].strip()
        if not line:
            continue

        if not COUNTRY_CODE_RE.fullmatch(line):
            raise DenylistSyntaxError(filename, lineno)

        codes.add(line)

    return frozenset(codes)


def load(path: typing.Union[str, os.PathLike]) -> Denylist:
    try:
        fp = open(path, encoding='utf-8-sig', errors='replace')
    except OSError as exc:
        raise ConfigError(f"Couldn't open blacklist {os.fspath(path)}: {exc.strerror}") from exc

    with fp:
        denylist = parse_lines(fp, filename=os.fspath(path))

    logger.debug('Loaded %s country codes from %s', len(denylist), os.fspath(path))
    return denylist
