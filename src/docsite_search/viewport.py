"""Fit embedded vector images to their container width.

Counterpart of the page script that runs on "load" and "resize": every
image is shown at its intrinsic size scaled to 150 dpi, shrunk to the
container's content width when that is narrower, keeping aspect ratio.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


# SVG user units are 96 dpi; plots are rendered for 150 dpi (150 / 96).
DPI_SCALE = 1.5625


@dataclass(frozen=True, slots=True)
class ImageSize:
    width: float
    height: float

    def as_style(self) -> dict[str, str]:
        """CSS declarations equivalent to the computed size."""
        return {"width": f"{self.width:g}px", "height": f"{self.height:g}px"}


@dataclass(frozen=True, slots=True)
class VectorImage:
    """Intrinsic size of one embedded vector image."""

    width: float
    height: float


def content_width(client_width: float, padding_left: float = 0.0, padding_right: float = 0.0) -> float:
    """Container width available to children (client width minus horizontal padding)."""
    return max(0.0, client_width - padding_left - padding_right)


def fit_vector_image(container_width: float, intrinsic_width: float, intrinsic_height: float) -> ImageSize:
    """Return the displayed size for an image inside a container.

    Missing or degenerate dimensions yield a zero size instead of an error.
    """
    if intrinsic_width <= 0 or container_width <= 0:
        return ImageSize(0.0, 0.0)
    width = min(container_width, intrinsic_width * DPI_SCALE)
    height = width * max(intrinsic_height, 0.0) / intrinsic_width
    return ImageSize(width, height)


def resize_vector_images(container_width: float, images: Iterable[VectorImage]) -> list[ImageSize]:
    """Apply ``fit_vector_image`` to every image of a container, in order."""
    return [fit_vector_image(container_width, image.width, image.height) for image in images]
