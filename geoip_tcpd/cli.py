import logging
import os

import click

from . import __version__
from . import config
from .handoff import ExecError

logger = logging.getLogger('geoip_tcpd.cli')

EXIT_USAGE = os.EX_USAGE
EXIT_CONFIG = os.EX_CONFIG
EXIT_EXEC = os.EX_OSERR


class ConfigurationFailed(click.ClickException):
    exit_code = EXIT_CONFIG


class ExecFailed(click.ClickException):
    exit_code = EXIT_EXEC


class GatekeeperCommand(click.Command):
    """Command whose usage errors never exit with the "denied" status"""

    def make_context(self, *args, **kwargs):
        try:
            return super().make_context(*args, **kwargs)
        except click.UsageError as exc:
            exc.exit_code = EXIT_USAGE
            raise


@click.command(
    cls=GatekeeperCommand,
    context_settings={
        # everything from PROGRAM on belongs to PROGRAM
        'allow_interspersed_args': False,
        'ignore_unknown_options': True,
        'help_option_names': ['-h', '--help'],
    },
)
@click.version_option(__version__, prog_name='geoip-tcpd')
@click.argument('blacklist', type=click.Path())
@click.argument('geoip_db', type=click.Path())
@click.argument('program')
@click.argument('args', nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def geoip_tcpd(ctx, blacklist, geoip_db, program, args):
    """Run PROGRAM unless the peer on standard input connects from a blacklisted country

    Meant to be started by inetd for every accepted connection.  BLACKLIST
    holds two-letter country codes, one per line, GEOIP_DB is a MaxMind DB
    (GeoLite2 Country or City).  Denied connections exit with status 2.
    """
    from .__main__ import run

    try:
        config.setup()
        status = run(blacklist, geoip_db, program, args)
    except config.ConfigError as exc:
        logger.error('%s', exc)
        raise ConfigurationFailed(str(exc)) from exc
    except ExecError as exc:
        logger.error('%s', exc)
        raise ExecFailed(str(exc)) from exc

    ctx.exit(status)


if __name__ == '__main__':
    geoip_tcpd(prog_name='geoip-tcpd')
