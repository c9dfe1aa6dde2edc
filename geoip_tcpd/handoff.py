import logging
import os
import subprocess
import typing

__all__ = (
    'EXIT_DENIED',
    'CAN_REPLACE_PROCESS',
    'ExecError',
    'exec_program',
)

logger = logging.getLogger('geoip_tcpd.handoff')

EXIT_DENIED = 2

CAN_REPLACE_PROCESS = os.name == 'posix'


class ExecError(Exception):
    pass


def exec_program(program: str, args: typing.Sequence[str]) -> int:
    """Hand the connection over to ``program``

    On POSIX the process image is replaced and this never returns.
    Elsewhere the program runs as a child with our standard streams and
    its exit status is returned.
    """
    argv = [program, *args]
    logger.debug('Exec %s', argv)

    try:
        if not CAN_REPLACE_PROCESS:
            return subprocess.run(argv, check=False).returncode

        os.execvp(program, argv)
    except OSError as exc:
        raise ExecError(f"Couldn't exec {program}: {exc.strerror or exc}") from exc
