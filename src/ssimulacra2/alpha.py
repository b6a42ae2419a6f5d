import numpy as np

from .errors import InvalidInputError
from .image import check_background


def alpha_blend(pixels, background):
    """Composite an RGBA buffer over a solid gray of intensity ``background``.

    RGB buffers are returned unchanged. The result never has an alpha channel.
    """
    background = check_background(background)
    if pixels.shape[2] == 3:
        return pixels
    if background is None:
        raise InvalidInputError("an RGBA buffer needs a background intensity")
    alpha = pixels[:, :, 3:4]
    blended = alpha * pixels[:, :, :3] + (1.0 - alpha) * np.float32(background)
    return blended.astype(np.float32, copy=False)
