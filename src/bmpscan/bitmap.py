from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Optional

import numpy as np
from PIL import Image

from bmpscan.log import Log
from bmpscan.encoding import decode, size_of, I32, U16, U32
from bmpscan.luminance import bgr_row_to_luminance, BYTES_PER_PIXEL


class BitmapError(Exception):
    """ A failed load. Carries what went wrong, for which file and, where there is one, the offending field. """

    class Kind(Enum):
        OpenFailure = 'cannot open file'
        TruncatedHeader = 'truncated header'
        BadMagic = 'bad magic'
        UnsupportedDepth = 'unsupported bit depth'
        UnsupportedCompression = 'unsupported compression'
        BadDimensions = 'bad dimensions'
        AllocationFailure = 'allocation failure'
        TruncatedPixels = 'truncated pixel data'
        BadOffset = 'bad pixel offset'
        ReadFailure = 'read failure'

    def __init__(self, kind: 'BitmapError.Kind', path: str, message: str, value: Optional[int] = None):
        super().__init__(f'{path}: {message}')
        self.kind = kind
        self.path = path
        self.message = message
        self.value = value


def _read_exactly(stream: BinaryIO, size: int) -> Optional[bytes]:
    data = stream.read(size)
    if len(data) != size:
        return None
    return data


@dataclass
class FileHeader:
    """ | Magic: u16 | File size: u32 | Reserved: u16 | Reserved: u16 | Pixel offset: u32 | """

    MAGIC = 0x4D42  # 'BM'
    FIELDS = [U16, U32, U16, U16, U32]
    SIZE = size_of(FIELDS)

    magic: int
    file_size: int
    reserved1: int
    reserved2: int
    offset: int

    @staticmethod
    def read(stream: BinaryIO, path: str) -> 'FileHeader':
        data = _read_exactly(stream, FileHeader.SIZE)
        if data is None:
            raise BitmapError(BitmapError.Kind.TruncatedHeader, path,
                              f'could not read the {FileHeader.SIZE}-byte file header')
        return FileHeader(*decode(data, FileHeader.FIELDS))


@dataclass
class InfoHeader:
    """
    The 40-byte BITMAPINFOHEADER. Larger (V4/V5) headers share this prefix, the rest of them is skipped
    by seeking to the pixel offset.
    """

    FIELDS = [U32, I32, I32, U16, U16, U32, U32, I32, I32, U32, U32]
    SIZE = size_of(FIELDS)

    header_size: int
    width: int
    height: int
    planes: int
    bit_depth: int
    compression: int
    image_size: int
    x_resolution: int
    y_resolution: int
    colors_used: int
    colors_important: int

    @property
    def top_down(self) -> bool:
        return self.height < 0

    @property
    def row_count(self) -> int:
        return abs(self.height)

    @property
    def stride(self) -> int:
        return ((self.width * BYTES_PER_PIXEL) + 3) & ~3

    @staticmethod
    def read(stream: BinaryIO, path: str) -> 'InfoHeader':
        data = _read_exactly(stream, InfoHeader.SIZE)
        if data is None:
            raise BitmapError(BitmapError.Kind.TruncatedHeader, path,
                              f'could not read the {InfoHeader.SIZE}-byte info header')
        return InfoHeader(*decode(data, InfoHeader.FIELDS))


class LuminanceImage:
    """ An 8-bit, top-down grayscale plane. """

    def __init__(self, width: int, height: int, pixels: np.ndarray):
        self.width = width
        self.height = height
        self.pixels = pixels

    @property
    def data(self) -> bytes:
        return self.pixels.tobytes()

    def to_image(self) -> Image.Image:
        return Image.frombytes('L', (self.width, self.height), self.data)

    def save(self, path: str):
        self.to_image().save(path)


def _validate(info_header: InfoHeader, path: str):
    if info_header.bit_depth != 24:
        raise BitmapError(BitmapError.Kind.UnsupportedDepth, path,
                          f'not a 24-bit BMP file (bit depth {info_header.bit_depth})', info_header.bit_depth)

    if info_header.compression != 0:
        raise BitmapError(BitmapError.Kind.UnsupportedCompression, path,
                          f'compressed BMP files are not supported (compression {info_header.compression})',
                          info_header.compression)

    if info_header.width <= 0:
        raise BitmapError(BitmapError.Kind.BadDimensions, path,
                          f'width must be positive (width {info_header.width})', info_header.width)

    if info_header.height == 0:
        raise BitmapError(BitmapError.Kind.BadDimensions, path, 'height must not be zero', info_header.height)


def _allocate(info_header: InfoHeader, path: str):
    size = info_header.width * info_header.row_count
    try:
        plane = np.empty((info_header.row_count, info_header.width), dtype=np.uint8)
    except (MemoryError, ValueError):
        raise BitmapError(BitmapError.Kind.AllocationFailure, path,
                          f'could not allocate {size} bytes for the luminance plane', size) from None

    try:
        scratch = bytearray(info_header.stride)
    except MemoryError:
        raise BitmapError(BitmapError.Kind.AllocationFailure, path,
                          f'could not allocate {info_header.stride} bytes for a pixel row',
                          info_header.stride) from None

    return plane, scratch


def _seek_pixels(stream: BinaryIO, offset: int, path: str):
    if stream.seekable():
        stream.seek(offset)
        return

    # Pipes can only move forward, and both headers have been consumed by now
    position = FileHeader.SIZE + InfoHeader.SIZE
    if offset < position:
        raise BitmapError(BitmapError.Kind.BadOffset, path,
                          f'pixel offset {offset} lies inside the headers of a non-seekable file', offset)

    remaining = offset - position
    while remaining > 0:
        skipped = len(stream.read(min(remaining, 64 * 1024)))
        if skipped == 0:
            raise BitmapError(BitmapError.Kind.TruncatedPixels, path,
                              f'file ends before the pixel offset {offset}', 0)
        remaining -= skipped


def _read_pixels(stream: BinaryIO, info_header: InfoHeader, plane: np.ndarray, scratch: bytearray, path: str):
    width = info_header.width
    height = info_header.row_count
    stride = len(scratch)

    # Rows are stored bottom-up unless the height is negative, the plane is always top-down
    for y in range(height):
        if stream.readinto(scratch) != stride:
            raise BitmapError(BitmapError.Kind.TruncatedPixels, path,
                              f'pixel data ends in row {y} of {height}', y)

        dst_y = y if info_header.top_down else height - 1 - y
        plane[dst_y] = bgr_row_to_luminance(scratch, width)


def load(path: str) -> LuminanceImage:
    """
    Loads a 24-bit uncompressed BMP file as a top-down luminance plane.

    Raises BitmapError on any failure; no partial image is ever returned.
    """
    try:
        stream = open(path, 'rb')
    except OSError as e:
        raise BitmapError(BitmapError.Kind.OpenFailure, path, f'cannot open file ({e.strerror})') from e

    with stream:
        try:
            file_header = FileHeader.read(stream, path)
            if file_header.magic != FileHeader.MAGIC:
                raise BitmapError(BitmapError.Kind.BadMagic, path,
                                  f'not a BMP file (magic 0x{file_header.magic:04X})', file_header.magic)

            info_header = InfoHeader.read(stream, path)
            _validate(info_header, path)

            Log.debug(f'{path}: {info_header.width}x{info_header.height}, {info_header.bit_depth} bpp, '
                      f'offset {file_header.offset}, stride {info_header.stride}, '
                      f'{"top-down" if info_header.top_down else "bottom-up"}')

            plane, scratch = _allocate(info_header, path)

            _seek_pixels(stream, file_header.offset, path)
            _read_pixels(stream, info_header, plane, scratch, path)
        except OSError as e:
            raise BitmapError(BitmapError.Kind.ReadFailure, path, f'read failed ({e})') from e

    return LuminanceImage(info_header.width, info_header.row_count, plane)
