"""Image normalizer: fits screenshots into the canonical comparison frame."""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from visual_compare.errors import ImageDecodeError, MissingImageError
from visual_compare.models.comparison import CapturedImage

logger = logging.getLogger(__name__)

CANONICAL_WIDTH = 1280
CANONICAL_HEIGHT = 800
TRANSPARENT_FILL = (255, 255, 255, 0)


def load_image(path: str | Path) -> CapturedImage:
    """Decode an image file into RGBA, mapping failures to domain errors."""
    path = Path(path)
    if not path.exists():
        raise MissingImageError(path)
    try:
        with Image.open(path) as img:
            img.load()
            rgba = img.convert("RGBA")
    except (UnidentifiedImageError, OSError, SyntaxError, EOFError, ValueError) as e:
        raise ImageDecodeError(path, str(e)) from e
    return CapturedImage(image=rgba, source_path=path)


class ImageNormalizer:
    """Resizes images with a "contain" fit and transparent padding."""

    def __init__(self, width: int = CANONICAL_WIDTH, height: int = CANONICAL_HEIGHT):
        self.width = width
        self.height = height

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    def fit(self, image: Image.Image) -> Image.Image:
        """Return ``image`` scaled into the canonical frame without distortion."""
        image = image.convert("RGBA")
        if image.size == self.size:
            return image

        resized = ImageOps.contain(image, self.size, method=Image.Resampling.LANCZOS)
        canvas = Image.new("RGBA", self.size, TRANSPARENT_FILL)
        offset = ((self.width - resized.width) // 2, (self.height - resized.height) // 2)
        canvas.paste(resized, offset)
        return canvas

    def normalize(self, path: str | Path) -> CapturedImage:
        """Normalize the image at ``path`` in place and return it."""
        captured = load_image(path)
        original_size = captured.size
        fitted = self.fit(captured.image)
        fitted.save(captured.source_path, format="PNG")
        if original_size != self.size:
            logger.debug("Normalized %s from %dx%d to %dx%d", captured.source_path,
                         original_size[0], original_size[1], self.width, self.height)
        return CapturedImage(image=fitted, source_path=captured.source_path)
