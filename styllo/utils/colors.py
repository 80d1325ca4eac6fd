"""sRGB to CIE LAB conversion (D65 reference white)."""

from typing import Tuple

import numpy as np

from styllo.core.models import LabColor

# sRGB (D65) primaries to XYZ
SRGB_TO_XYZ = np.array([
    [0.4124564, 0.3575761, 0.1804375],
    [0.2126729, 0.7151522, 0.0721750],
    [0.0193339, 0.1191920, 0.9503041],
])

D65_WHITE = np.array([0.95047, 1.0, 1.08883])

_EPSILON = 0.008856
_KAPPA_SLOPE = 7.787


def srgb_to_linear(channel):
    """Undo the sRGB transfer curve for 8-bit channel value(s)"""
    c = np.asarray(channel, dtype=np.float64) / 255.0
    return np.where(c <= 0.04045, c / 12.92, ((c + 0.055) / 1.055) ** 2.4)


def _lab_f(t: np.ndarray) -> np.ndarray:
    return np.where(t > _EPSILON, np.cbrt(t), _KAPPA_SLOPE * t + 16.0 / 116.0)


def rgb_array_to_lab(rgb) -> np.ndarray:
    """Convert an (..., 3) array of 8-bit RGB values to an (..., 3) array of L, a, b"""
    linear = srgb_to_linear(rgb)
    xyz = linear @ SRGB_TO_XYZ.T
    f = _lab_f(xyz / D65_WHITE)
    fx, fy, fz = f[..., 0], f[..., 1], f[..., 2]
    return np.stack([116.0 * fy - 16.0, 500.0 * (fx - fy), 200.0 * (fy - fz)], axis=-1)


def rgb_to_lab(r: float, g: float, b: float) -> LabColor:
    L, a, b_ = rgb_array_to_lab(np.array([r, g, b], dtype=np.float64))
    return LabColor(float(L), float(a), float(b_))


def rgb_to_hex(rgb: Tuple[int, int, int]) -> str:
    r, g, b = rgb
    return f"#{int(r):02X}{int(g):02X}{int(b):02X}"


def rgb_to_bgr(rgb: Tuple[int, int, int]) -> Tuple[int, int, int]:
    """OpenCV drawing calls take BGR tuples"""
    r, g, b = rgb
    return (int(b), int(g), int(r))
