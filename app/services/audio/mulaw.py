"""G.711 μ-law decoding to signed 16-bit linear PCM."""
import numpy as np

MULAW_BIAS = 0x84


def _to_int16(value: int) -> int:
    """Wrap an integer into the signed 16-bit range."""
    return ((value + 0x8000) & 0xFFFF) - 0x8000


def decode_byte(value: int) -> int:
    """
    Expand one μ-law byte into a linear sample.

    The magnitude is ``((mantissa << 4) + 0x08) << (exponent + 3)`` less the
    0x84 bias, negated when the sign bit is set and stored as int16 (high
    segments wrap, as a 16-bit PCM buffer would).

    Args:
        value: Encoded byte, 0-255

    Returns:
        Signed 16-bit amplitude
    """
    if not 0 <= value <= 0xFF:
        raise ValueError(f"μ-law byte out of range: {value}")

    value = ~value & 0xFF
    sign = value & 0x80
    exponent = (value >> 4) & 0x07
    mantissa = value & 0x0F
    sample = (((mantissa << 4) + 0x08) << (exponent + 3)) - MULAW_BIAS
    return _to_int16(-sample if sign else sample)


# 256-entry lookup table, index = encoded byte
MULAW_LUT = np.array([decode_byte(b) for b in range(256)], dtype=np.int16)


def decode(data: bytes) -> np.ndarray:
    """Decode μ-law bytes into an int16 array of the same length."""
    if not data:
        return np.zeros(0, dtype=np.int16)
    return MULAW_LUT[np.frombuffer(data, dtype=np.uint8)]
