"""
Color conversions used by the palette pipeline.

sRGB -> linear -> XYZ (D65) -> LAB, HSV for hue/saturation, hex encoding.
Everything here is pure: identical input gives bit-identical output.
"""

import math

import numpy as np


# =============================================================================
# Constants
# =============================================================================

# D65 sRGB -> XYZ
SRGB_TO_XYZ = np.array([
    [0.4124564, 0.3575761, 0.1804375],
    [0.2126729, 0.7151522, 0.0721750],
    [0.0193339, 0.1191920, 0.9503041],
])

# D65 reference white
XN, YN, ZN = 0.95047, 1.0, 1.08883

LAB_DELTA = 6 / 29


# =============================================================================
# sRGB / LAB
# =============================================================================

def srgb_to_linear(c):
    """Undo the sRGB transfer curve. Accepts a scalar or array in [0, 1]."""
    c = np.asarray(c, dtype=np.float64)
    out = np.where(c <= 0.04045, c / 12.92, ((c + 0.055) / 1.055) ** 2.4)
    return float(out) if out.ndim == 0 else out


def lab_f(t):
    """LAB companding function."""
    t = np.asarray(t, dtype=np.float64)
    out = np.where(
        t > LAB_DELTA ** 3,
        np.cbrt(t),
        t / (3 * LAB_DELTA * LAB_DELTA) + 4 / 29,
    )
    return float(out) if out.ndim == 0 else out


def rgb_to_lab(rgb: np.ndarray) -> np.ndarray:
    """Convert RGB array (0-255, shape (N, 3)) to LAB."""
    rgb = np.asarray(rgb)
    if rgb.ndim == 1:
        rgb = rgb.reshape(1, -1)

    rgb_linear = srgb_to_linear(rgb.astype(np.float64) / 255.0)

    r, g, b = rgb_linear[:, 0], rgb_linear[:, 1], rgb_linear[:, 2]
    x = r * SRGB_TO_XYZ[0, 0] + g * SRGB_TO_XYZ[0, 1] + b * SRGB_TO_XYZ[0, 2]
    y = r * SRGB_TO_XYZ[1, 0] + g * SRGB_TO_XYZ[1, 1] + b * SRGB_TO_XYZ[1, 2]
    z = r * SRGB_TO_XYZ[2, 0] + g * SRGB_TO_XYZ[2, 1] + b * SRGB_TO_XYZ[2, 2]

    fx = lab_f(x / XN)
    fy = lab_f(y / YN)
    fz = lab_f(z / ZN)

    L = 116 * fy - 16
    a = 500 * (fx - fy)
    b_val = 200 * (fy - fz)

    return np.column_stack([L, a, b_val])


def rgb_to_lab_tuple(rgb) -> tuple[float, float, float]:
    """Convert a single (r, g, b) triple to an (L, a, b) tuple."""
    L, a, b = rgb_to_lab(np.array([rgb]))[0]
    return (float(L), float(a), float(b))


def lab_distance_sq(a, b) -> float:
    """Squared Euclidean distance between two LAB triples."""
    d0 = a[0] - b[0]
    d1 = a[1] - b[1]
    d2 = a[2] - b[2]
    return float(d0 * d0 + d1 * d1 + d2 * d2)


def lab_distance(a, b) -> float:
    return math.sqrt(lab_distance_sq(a, b))


# =============================================================================
# Hex / HSV
# =============================================================================

def clamp(n: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, n))


def round_half_up(x: float) -> int:
    """Round halves up (round() rounds half to even)."""
    return int(math.floor(x + 0.5))


def rgb_to_hex(r: float, g: float, b: float) -> str:
    """Encode channels as #RRGGBB, clamping each to [0, 255] after rounding."""
    def to2(x):
        return f"{int(clamp(round_half_up(x), 0, 255)):02X}"

    return f"#{to2(r)}{to2(g)}{to2(b)}"


def rgb_to_hsv(rgb) -> tuple[float, float, float]:
    """
    Convert an 8-bit (r, g, b) triple to HSV.

    Returns:
        (hue in [0, 360), saturation in [0, 1], value in [0, 1]).
        Hue is 0 for achromatic colors.
    """
    r, g, b = (c / 255 for c in rgb)

    cmax = max(r, g, b)
    cmin = min(r, g, b)
    diff = cmax - cmin

    h = 0.0
    if diff != 0:
        if cmax == r:
            h = ((g - b) / diff) % 6
        elif cmax == g:
            h = (b - r) / diff + 2
        else:
            h = (r - g) / diff + 4
        h *= 60
        if h >= 360:
            h -= 360

    s = 0.0 if cmax == 0 else diff / cmax
    return h, s, cmax
