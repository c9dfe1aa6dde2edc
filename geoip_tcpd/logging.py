import logging.config
import logging.handlers
import os
import sys


class BetterRotatingFileHandler(logging.handlers.RotatingFileHandler):
    def _open(self):
        os.makedirs(os.path.dirname(self.baseFilename), exist_ok=True)
        return super()._open()


def get_handler_opts(filename: str, level: str):
    if filename == '/dev/null':
        return {
            'class': 'logging.NullHandler',
            'level': level,
        }

    if filename == '/dev/log':
        # same place tcpd reports to
        return {
            'class': 'logging.handlers.SysLogHandler',
            'address': '/dev/log',
            'facility': logging.handlers.SysLogHandler.LOG_AUTH,
            'level': level,
            'formatter': 'syslog',
        }

    if filename.startswith('/dev/'):
        filename = filename.rstrip('/')
        stream = {'/dev/stderr': sys.stderr, '/dev/stdout': sys.stdout}[filename]
        return {
            'class': 'logging.StreamHandler',
            'stream': stream,
            'level': level,
            'formatter': 'verbose',
        }

    return {
        'class': BetterRotatingFileHandler.__module__ + '.' + BetterRotatingFileHandler.__qualname__,
        'maxBytes': 1024 * 1024,
        'backupCount': 3,
        'level': level,
        'formatter': 'verbose',
        'filename': filename,
    }


def setup_logging(loglevel='INFO', log_filename: str = None):
    """Route every record to a single handler

    There is no console handler: under inetd both stdout and stderr
    are usually the peer's socket.
    """
    if log_filename is None:
        log_filename = '/dev/null'

    # fmt: off
    logging.config.dictConfig(
        {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'verbose': {
                    'format': '%(asctime)s [%(levelname)s] [%(name)s] %(message)s',
                },
                'syslog': {
                    'format': 'geoip-tcpd[%(process)d]: [%(levelname)s] %(message)s',
                },
            },
            'handlers': {
                'log_file': get_handler_opts(log_filename, loglevel),
            },
            'loggers': {
                '': {'handlers': ['log_file'], 'level': 'DEBUG', 'propagate': False},
            },
        }
    )
    # fmt: on
