from ipaddress import IPv4Address
from types import SimpleNamespace
from unittest.mock import create_autospec

import geoip2.database
import geoip2.errors
import pytest
from maxminddb.errors import InvalidDatabaseError

from geoip_tcpd import resolver as resolver_module
from geoip_tcpd.config import ConfigError
from geoip_tcpd.resolver import GeoIPResolver


@pytest.fixture(params=['GeoLite2-Country'])
def database_type(request):
    return request.param


@pytest.fixture()
def reader(database_type):
    reader = create_autospec(geoip2.database.Reader, instance=True)
    reader.metadata.return_value.database_type = database_type
    return reader


def _response(iso_code):
    return SimpleNamespace(country=SimpleNamespace(iso_code=iso_code))


@pytest.fixture()
def open_reader(mocker, reader):
    return mocker.patch.object(resolver_module.geoip2.database, 'Reader', return_value=reader)


def test_open(open_reader, reader, tmp_path):
    path = tmp_path / 'GeoLite2-Country.mmdb'

    with GeoIPResolver.open(path) as resolver:
        assert resolver.reader is reader

    open_reader.assert_called_once_with(str(path))
    reader.close.assert_called_once_with()


def test_country_of(open_reader, reader):
    reader.country.return_value = _response('FR')

    resolver = GeoIPResolver.open('GeoLite2-Country.mmdb')

    assert resolver.country_of(IPv4Address('1.2.3.4')) == 'FR'
    reader.country.assert_called_once_with('1.2.3.4')


def test_address_not_found(open_reader, reader):
    reader.country.side_effect = geoip2.errors.AddressNotFoundError('The address 10.0.0.1 is not in the database.')

    resolver = GeoIPResolver.open('GeoLite2-Country.mmdb')

    assert resolver.country_of(IPv4Address('10.0.0.1')) is None


def test_record_without_country(open_reader, reader):
    reader.country.return_value = _response(None)

    resolver = GeoIPResolver.open('GeoLite2-Country.mmdb')

    assert resolver.country_of(IPv4Address('1.2.3.4')) is None


@pytest.mark.parametrize('database_type', ['GeoIP2-City', 'GeoLite2-City'])
def test_city_database(open_reader, reader):
    reader.city.return_value = _response('DE')

    resolver = GeoIPResolver.open('GeoLite2-City.mmdb')

    assert resolver.country_of(IPv4Address('5.6.7.8')) == 'DE'
    reader.city.assert_called_once_with('5.6.7.8')
    reader.country.assert_not_called()


@pytest.mark.parametrize('database_type', ['GeoLite2-ASN'])
def test_database_without_countries(open_reader, reader):
    with pytest.raises(ConfigError, match='GeoLite2-ASN'):
        GeoIPResolver.open('GeoLite2-ASN.mmdb')

    reader.close.assert_called_once_with()


def test_missing_database(tmp_path):
    path = tmp_path / 'missing.mmdb'
    with pytest.raises(ConfigError, match="Couldn't open GeoIP database file") as exc_info:
        GeoIPResolver.open(path)
    assert str(path) in str(exc_info.value)


def test_not_a_database(tmp_path):
    path = tmp_path / 'GeoIP.dat'
    path.write_bytes(b'definitely not a MaxMind DB' * 100)
    with pytest.raises(ConfigError, match="Couldn't open GeoIP database file"):
        GeoIPResolver.open(path)


@pytest.mark.parametrize('database_type', ['GeoIP2-Enterprise'])
def test_enterprise_database(open_reader, reader):
    reader.enterprise.return_value = _response('JP')

    resolver = GeoIPResolver.open('GeoIP2-Enterprise.mmdb')

    assert resolver.country_of(IPv4Address('5.6.7.8')) == 'JP'
    reader.enterprise.assert_called_once_with('5.6.7.8')


def test_corrupt_database_on_lookup(open_reader, reader):
    reader.country.side_effect = InvalidDatabaseError("The MaxMind DB file's data section contains bad data")

    resolver = GeoIPResolver.open('GeoLite2-Country.mmdb')

    with pytest.raises(ConfigError, match='GeoLite2-Country is corrupt'):
        resolver.country_of(IPv4Address('1.2.3.4'))
