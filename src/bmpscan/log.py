import argparse
import logging
import sys


class Log:
    """
    Thin static facade over the package logger, so modules can log without carrying a logger around.
    Everything goes to stderr: stdout is reserved for scan results.
    """

    NAME = 'bmpscan'
    LEVELS = {
        'debug': logging.DEBUG,
        'info': logging.INFO,
        'warning': logging.WARNING,
        'error': logging.ERROR,
    }

    logger = logging.getLogger(NAME)

    @staticmethod
    def add_args(parser: argparse.ArgumentParser):
        parser.add_argument('--log-level', default='warning', choices=list(Log.LEVELS.keys()),
                            help='Diagnostic verbosity')

    @staticmethod
    def setup(args):
        for handler in list(Log.logger.handlers):
            Log.logger.removeHandler(handler)

        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(f'{Log.NAME}: %(levelname)-8s %(message)s'))
        Log.logger.addHandler(handler)
        Log.logger.setLevel(Log.LEVELS[args.log_level])
        Log.logger.propagate = False

    @staticmethod
    def debug(message: str):
        Log.logger.debug(message)

    @staticmethod
    def info(message: str):
        Log.logger.info(message)

    @staticmethod
    def warning(message: str):
        Log.logger.warning(message)

    @staticmethod
    def error(message: str):
        Log.logger.error(message)
