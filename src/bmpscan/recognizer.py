from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

import numpy as np
import zxingcpp

from bmpscan.log import Log
from bmpscan.bitmap import LuminanceImage


class RecognizerError(RuntimeError):
    pass


@dataclass
class DecodeResult:
    payload: Optional[bytes] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @staticmethod
    def success(payload: bytes) -> 'DecodeResult':
        return DecodeResult(payload=bytes(payload))

    @staticmethod
    def failure(reason: str) -> 'DecodeResult':
        return DecodeResult(error=reason)


def read_qr_codes(pixels: np.ndarray) -> List[DecodeResult]:
    """ Runs zxing-cpp over a top-down grayscale plane, keeping the codes it located but could not decode. """
    results = []
    for barcode in zxingcpp.read_barcodes(pixels, formats=zxingcpp.BarcodeFormat.QRCode, return_errors=True):
        if barcode.valid:
            results.append(DecodeResult.success(barcode.bytes))
        else:
            reason = str(barcode.error) if barcode.error else 'unknown error'
            results.append(DecodeResult.failure(reason))
    return results


class Recognizer:
    def __init__(self, reader: Optional[Callable[[np.ndarray], Iterable[DecodeResult]]] = None):
        self.reader = reader if reader is not None else read_qr_codes

    def scan(self, image: LuminanceImage) -> List[DecodeResult]:
        Log.debug(f'Scanning {image.width}x{image.height} luminance plane')
        try:
            results = list(self.reader(image.pixels))
        except Exception as e:
            raise RecognizerError(f'QR recognition failed: {e}') from e

        Log.info(f'Recognizer returned {len(results)} code(s)')
        return results
