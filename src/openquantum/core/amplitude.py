"""Complex probability amplitudes.

An :class:`Amplitude` is an immutable complex number ``real + imag*i``.  Its
squared magnitude is the probability weight it contributes to an outcome
(Born rule)::

    P = |a + bi|^2 = a^2 + b^2

Amplitudes are frozen dataclasses: every arithmetic operation returns a new
instance and never mutates its operands.  Both components are validated to be
finite on construction, so NaN/inf can never leak into a superposition.

Example::

    from openquantum.core.amplitude import Amplitude

    a = Amplitude(3, 4)
    a.magnitude          # 5.0
    a * a.conjugate()    # Amplitude(real=25.0, imag=0.0)
    Amplitude.from_polar(1.0, math.pi / 2)
"""

from __future__ import annotations

import math
import numbers
import sys
from dataclasses import dataclass
from typing import Any

from openquantum.exceptions import InvalidArgumentError, OutOfRangeError

# Smallest divisor magnitude^2 accepted by ``divide``.
DIVISION_EPSILON = sys.float_info.epsilon


def _is_real(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


@dataclass(frozen=True)
class Amplitude:
    """Immutable complex amplitude.

    Attributes:
        real: Real component (finite float).
        imag: Imaginary component (finite float).

    Raises:
        InvalidArgumentError: If either component is not a finite real number.
    """

    real: float = 0.0
    imag: float = 0.0

    def __post_init__(self) -> None:
        for name in ("real", "imag"):
            value = getattr(self, name)
            if not _is_real(value) or not math.isfinite(value):
                raise InvalidArgumentError(
                    f"Amplitude {name} component must be a finite number, got {value!r}",
                    argument=name,
                )
            object.__setattr__(self, name, float(value))

    # ------------------------------------------------------------------
    # Derived quantities
    # ------------------------------------------------------------------

    @property
    def magnitude(self) -> float:
        """Euclidean magnitude ``|z| = hypot(real, imag)``."""
        return math.hypot(self.real, self.imag)

    @property
    def magnitude_squared(self) -> float:
        """Squared magnitude ``|z|^2``; the Born-rule probability weight."""
        return self.real * self.real + self.imag * self.imag

    @property
    def phase(self) -> float:
        """Polar angle in radians, in the half-open interval (-pi, pi]."""
        angle = math.atan2(self.imag, self.real)
        if angle == -math.pi:
            return math.pi
        return angle

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def add(self, other: Amplitude) -> Amplitude:
        other = _coerce(other, "add")
        return Amplitude(self.real + other.real, self.imag + other.imag)

    def subtract(self, other: Amplitude) -> Amplitude:
        other = _coerce(other, "subtract")
        return Amplitude(self.real - other.real, self.imag - other.imag)

    def multiply(self, other: Amplitude) -> Amplitude:
        """``(a + bi)(c + di) = (ac - bd) + (ad + bc)i``."""
        other = _coerce(other, "multiply")
        return Amplitude(
            self.real * other.real - self.imag * other.imag,
            self.real * other.imag + self.imag * other.real,
        )

    def divide(self, other: Amplitude) -> Amplitude:
        """``z / w = z * conj(w) / |w|^2``.

        Raises:
            OutOfRangeError: If ``|w|^2`` is at or below machine epsilon.
        """
        other = _coerce(other, "divide")
        denominator = other.magnitude_squared
        if denominator <= DIVISION_EPSILON:
            raise OutOfRangeError(
                "Cannot divide by a zero-magnitude amplitude",
                value=other,
            )
        numerator = self.multiply(other.conjugate())
        return Amplitude(numerator.real / denominator, numerator.imag / denominator)

    def scale(self, factor: float) -> Amplitude:
        """Multiply both components by a finite real scalar."""
        if not _is_real(factor):
            raise InvalidArgumentError(
                f"Scale factor must be a real number, got {type(factor).__name__}",
                argument="factor",
            )
        if not math.isfinite(factor):
            raise OutOfRangeError(f"Scale factor must be finite, got {factor!r}", value=factor)
        return Amplitude(self.real * factor, self.imag * factor)

    def conjugate(self) -> Amplitude:
        return Amplitude(self.real, -self.imag)

    def equals(self, other: Amplitude, epsilon: float = 1e-12) -> bool:
        """Componentwise comparison within ``epsilon``."""
        other = _coerce(other, "equals")
        if not _is_real(epsilon) or not math.isfinite(epsilon) or epsilon < 0:
            raise OutOfRangeError(
                f"epsilon must be a non-negative finite number, got {epsilon!r}",
                value=epsilon,
            )
        return abs(self.real - other.real) <= epsilon and abs(self.imag - other.imag) <= epsilon

    # Operator sugar -- delegates to the named methods above.

    def __add__(self, other: Amplitude) -> Amplitude:
        if not isinstance(other, Amplitude):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: Amplitude) -> Amplitude:
        if not isinstance(other, Amplitude):
            return NotImplemented
        return self.subtract(other)

    def __mul__(self, other: Any) -> Amplitude:
        if isinstance(other, Amplitude):
            return self.multiply(other)
        if _is_real(other):
            return self.scale(other)
        return NotImplemented

    def __rmul__(self, other: Any) -> Amplitude:
        if _is_real(other):
            return self.scale(other)
        return NotImplemented

    def __truediv__(self, other: Amplitude) -> Amplitude:
        if not isinstance(other, Amplitude):
            return NotImplemented
        return self.divide(other)

    def __neg__(self) -> Amplitude:
        return Amplitude(-self.real, -self.imag)

    def __abs__(self) -> float:
        return self.magnitude

    def __complex__(self) -> complex:
        return complex(self.real, self.imag)

    def __str__(self) -> str:
        sign = "+" if self.imag >= 0 else "-"
        return f"{self.real:.6f}{sign}{abs(self.imag):.6f}i"

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_polar(cls, magnitude: float, phase: float) -> Amplitude:
        """Build ``r * (cos(theta) + i sin(theta))``.

        Raises:
            OutOfRangeError: If ``magnitude < 0`` or either input is not finite.
        """
        if not _is_real(magnitude) or not _is_real(phase):
            raise InvalidArgumentError("Polar components must be real numbers")
        if not math.isfinite(magnitude) or not math.isfinite(phase):
            raise OutOfRangeError(
                f"Polar components must be finite, got ({magnitude!r}, {phase!r})",
                value=(magnitude, phase),
            )
        if magnitude < 0:
            raise OutOfRangeError(
                f"Polar magnitude must be non-negative, got {magnitude!r}",
                value=magnitude,
            )
        return cls(magnitude * math.cos(phase), magnitude * math.sin(phase))

    @classmethod
    def from_complex(cls, value: complex) -> Amplitude:
        return cls(value.real, value.imag)

    @classmethod
    def zero(cls) -> Amplitude:
        return cls(0.0, 0.0)

    @classmethod
    def one(cls) -> Amplitude:
        return cls(1.0, 0.0)


def _coerce(value: Any, operation: str) -> Amplitude:
    if isinstance(value, Amplitude):
        return value
    raise InvalidArgumentError(
        f"Amplitude.{operation} requires an Amplitude operand, got {type(value).__name__}",
        argument="other",
    )
