import numpy as np

# ITU-R BT.601 luma weights
RED_WEIGHT = 0.299
GREEN_WEIGHT = 0.587
BLUE_WEIGHT = 0.114

BYTES_PER_PIXEL = 3


def luminance(r: int, g: int, b: int) -> int:
    """ Luminance of a single pixel, truncated toward zero. """
    return int(RED_WEIGHT * r + GREEN_WEIGHT * g + BLUE_WEIGHT * b)


def bgr_row_to_luminance(row, width: int) -> np.ndarray:
    """
    Converts one packed BGR row into ``width`` luminance bytes.

    Only the first ``width * 3`` bytes of ``row`` are looked at, so a padded row can be passed as is.
    The products are summed in float64 in the same order as ``luminance()``, which keeps both
    bit-identical over the whole input domain; the cast to uint8 truncates.
    """
    pixels = np.frombuffer(row, dtype=np.uint8, count=width * BYTES_PER_PIXEL).reshape(width, BYTES_PER_PIXEL)
    channels = pixels.astype(np.float64)

    blue = channels[:, 0]
    green = channels[:, 1]
    red = channels[:, 2]

    return (RED_WEIGHT * red + GREEN_WEIGHT * green + BLUE_WEIGHT * blue).astype(np.uint8)
