from enum import Enum
from functools import wraps
from typing import List, Sequence

import struct


class ByteOrder(Enum):
    LittleEndian = '<'
    Default = LittleEndian


class Format(Enum):
    u16 = 'H'
    i32 = 'i'
    u32 = 'I'

    @property
    def signed(self) -> bool:
        return self.name[0] == 'i'

    @property
    def bits(self) -> int:
        return int(self.name[1:])

    @property
    def limits(self):
        if self.signed:
            return -2 ** (self.bits - 1), (2 ** (self.bits - 1)) - 1
        return 0, (2 ** self.bits) - 1


def packed_int(fmt: Format):
    """
    Turns an empty class into a range-checked integer of the given wire format.
    The decorated name stays callable (``U16(0x4D42)``) and exposes ``format`` so it can
    also describe a field when decoding.
    """

    def decorator(cls):
        min_value, max_value = fmt.limits

        @wraps(cls)
        def wrapper(value):
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError(f'{cls.__name__} value must be of type {int.__name__}')

            if value < min_value:
                raise ValueError(f'{cls.__name__} value must be at least {min_value}')

            if value > max_value:
                raise ValueError(f'{cls.__name__} value must be at most {max_value}')

            instance = cls.__new__(cls)
            instance.value = value
            instance.format = fmt
            return instance

        wrapper.format = fmt
        return wrapper

    return decorator


@packed_int(Format.u16)
class U16:
    pass


@packed_int(Format.i32)
class I32:
    pass


@packed_int(Format.u32)
class U32:
    pass


def _layout(types: Sequence) -> str:
    return f'{ByteOrder.Default.value}{"".join(t.format.value for t in types)}'


def size_of(types: Sequence) -> int:
    return struct.calcsize(_layout(types))


def encode(ints: List[packed_int]) -> bytes:
    return struct.pack(_layout(ints), *(x.value for x in ints))


def decode(data: bytes, types: Sequence) -> List[int]:
    # struct.error if len(data) does not match the layout exactly
    return list(struct.unpack(_layout(types), data))
