import logging
from ipaddress import IPv4Address
from ipaddress import ip_address

import pytest


class FakeResolver:
    """In-memory country lookups, remembers what was asked"""

    def __init__(self, countries: dict):
        self.countries = {ip_address(addr): code for addr, code in countries.items()}
        self.lookups = []
        self.closed = False

    def country_of(self, address: IPv4Address):
        self.lookups.append(address)
        return self.countries.get(address)

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


@pytest.fixture(params=[{}], ids=['no-countries'])
def countries(request):
    """Mapping: address -> country code known to the resolver"""
    return request.param


@pytest.fixture()
def resolver(countries) -> FakeResolver:
    return FakeResolver(countries)


@pytest.fixture()
def make_blacklist(tmp_path):
    def make(content: str, name: str = 'blacklist.txt'):
        path = tmp_path / name
        path.write_text(content)
        return path

    return make


@pytest.fixture()
def blacklist(make_blacklist):
    return make_blacklist('FR\nCN  # comment\n')


@pytest.fixture(autouse=True)
def _check_no_errors(request, caplog):
    yield
    if request.node.get_closest_marker('allow_error_logs'):
        return
    for when in ('setup', 'call'):
        messages = [x.message for x in caplog.get_records(when) if x.levelno >= logging.ERROR]
        if messages:
            pytest.fail(f'error messages encountered during testing: {messages!r}')
