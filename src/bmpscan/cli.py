import argparse
import sys

from dataclasses import dataclass
from typing import List, Optional

from bmpscan.log import Log
from bmpscan.bitmap import BitmapError, load
from bmpscan.recognizer import Recognizer, RecognizerError
from bmpscan.report import write_report


class ArgumentParser(argparse.ArgumentParser):
    """ Usage errors exit with status 1 rather than argparse's 2. """

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f'{self.prog}: error: {message}\n')


@dataclass
class ScanConfig:
    path: str
    dump_luminance: Optional[str] = None

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser):
        parser.add_argument('path', type=str, help='24-bit uncompressed BMP file to scan')
        parser.add_argument('--dump-luminance', type=str, metavar='FILE',
                            help='Save the luminance plane handed to the recognizer (format from the file suffix)')

    @staticmethod
    def from_args(args) -> 'ScanConfig':
        return ScanConfig(args.path, args.dump_luminance)


def make_parser() -> ArgumentParser:
    parser = ArgumentParser('bmpscan', description='Decode QR codes from a 24-bit BMP image')
    Log.add_args(parser)
    ScanConfig.add_arguments(parser)
    return parser


def scan(config: ScanConfig, recognizer: Optional[Recognizer] = None) -> int:
    try:
        image = load(config.path)
    except BitmapError as e:
        Log.error(f'Failed to load BMP: {e}')
        return 1

    Log.info(f'Loaded {config.path}: {image.width}x{image.height}')

    if config.dump_luminance is not None:
        try:
            image.save(config.dump_luminance)
        except (OSError, ValueError) as e:
            Log.error(f'Failed to save luminance plane to {config.dump_luminance}: {e}')
            return 1
        Log.info(f'Luminance plane saved to {config.dump_luminance}')

    if recognizer is None:
        recognizer = Recognizer()

    try:
        results = recognizer.scan(image)
    except RecognizerError as e:
        Log.error(str(e))
        return 1

    write_report(results, sys.stdout)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = make_parser()
    args = parser.parse_args(argv)
    Log.setup(args)

    return scan(ScanConfig.from_args(args))


def sync_main():
    sys.exit(main())


if __name__ == '__main__':
    sync_main()
