import logging
import pathlib
import typing

import sentry_sdk
from pydantic import AnyHttpUrl
from pydantic import ValidationError
from pydantic import field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict
from sentry_sdk.integrations.logging import LoggingIntegration

from . import __version__
from .logging import setup_logging

__all__ = (
    'Settings',
    'ConfigError',
    'settings',
    'setup',
    'teardown',
)

logger = logging.getLogger('geoip_tcpd.config')


class ConfigError(Exception):
    pass


class Settings(BaseSettings):
    """Runtime knobs, taken from ``GEOIP_TCPD_*`` environment variables

    Everything the gatekeeper decides on comes from the command line;
    these only steer logging and error reporting.
    """

    model_config = SettingsConfigDict(env_file='.env', env_prefix='GEOIP_TCPD_', extra='ignore')

    sentry_dsn: typing.Optional[AnyHttpUrl] = None
    log_file: pathlib.Path = pathlib.Path('/dev/null')
    loglevel: str = 'INFO'

    @field_validator('loglevel')
    @classmethod
    def _check_loglevel(cls, v):
        from logging import _checkLevel  # noqa

        v = v.upper()
        _checkLevel(v)
        return v


settings: typing.Optional[Settings] = None


def setup(settings_: Settings = None) -> Settings:
    global settings
    if settings_ is None:
        try:
            settings_ = Settings()
        except ValidationError as exc:
            raise ConfigError(f'Invalid settings: {exc}') from exc

    settings = settings_

    if settings.sentry_dsn:
        sentry_logging = LoggingIntegration(
            level=logging.DEBUG,  # Capture info and above as breadcrumbs
            event_level=logging.ERROR,  # Send errors as events
        )
        sentry_sdk.init(
            dsn=str(settings.sentry_dsn),
            integrations=[sentry_logging],
            release=__version__,
        )

    try:
        setup_logging(loglevel=settings.loglevel, log_filename=settings.log_file.as_posix())
    except (ValueError, KeyError) as exc:
        raise ConfigError(f"Couldn't set up logging to {settings.log_file}: {exc}") from exc

    if settings.sentry_dsn:
        logger.debug('Sentry enabled')
    else:
        logger.debug('Sentry disabled')

    return settings


def teardown():
    """Flush whatever is buffered, ``exec`` skips interpreter shutdown"""
    if settings is not None and settings.sentry_dsn:
        sentry_sdk.flush()

    for handler in logging.getLogger().handlers:
        handler.flush()
