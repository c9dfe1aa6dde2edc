import logging
import os
import typing
from ipaddress import IPv4Address

import geoip2.database
import geoip2.errors
from maxminddb.errors import InvalidDatabaseError

from .config import ConfigError

__all__ = (
    'CountryResolver',
    'GeoIPResolver',
)

logger = logging.getLogger('geoip_tcpd.resolver')


class CountryResolver(typing.Protocol):
    def country_of(self, address: IPv4Address) -> typing.Optional[str]:
        ...


class GeoIPResolver:
    """Country lookups against a MaxMind DB (GeoLite2/GeoIP2 Country, City or Enterprise)"""

    def __init__(self, reader: geoip2.database.Reader):
        database_type = reader.metadata().database_type
        if 'Country' in database_type:
            self._lookup = reader.country
        elif 'City' in database_type:
            self._lookup = reader.city
        elif 'Enterprise' in database_type:
            self._lookup = reader.enterprise
        else:
            reader.close()
            raise ConfigError(f'GeoIP database has no country data: {database_type}')

        self.reader = reader
        self.database_type = database_type

    @classmethod
    def open(cls, path: typing.Union[str, os.PathLike]) -> 'GeoIPResolver':
        try:
            reader = geoip2.database.Reader(os.fspath(path))
        except (OSError, ValueError, InvalidDatabaseError) as exc:
            raise ConfigError(f"Couldn't open GeoIP database file {os.fspath(path)}: {exc}") from exc

        resolver = cls(reader)
        logger.debug('Opened %s database %s', resolver.database_type, os.fspath(path))
        return resolver

    def country_of(self, address: IPv4Address) -> typing.Optional[str]:
        try:
            response = self._lookup(str(address))
        except geoip2.errors.AddressNotFoundError:
            return None
        except InvalidDatabaseError as exc:
            raise ConfigError(f'GeoIP database {self.database_type} is corrupt: {exc}') from exc

        # anonymous proxies and the like carry no country
        return response.country.iso_code or None

    def close(self):
        self.reader.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
