"""
Physical unit conversions.

Membrane models are configured in the conventional units of computational
neuroscience (mV, ms, MΩ, nA, nS, pA) and simulated in SI base units. The
conversion happens once, in the model constructors, through `to_base`; the
opposite direction (`from_base`) gives the coefficients used to report the
membrane potential back in mV and to read stimuli as nA.
"""

from dataclasses import dataclass
from enum import Enum


class MetricPrefix(Enum):
    r"""Metric prefixes with their multiplicative factor relative to the base unit."""

    ATTO = 1e-18
    FEMTO = 1e-15
    PICO = 1e-12
    NANO = 1e-9
    MICRO = 1e-6
    MILLI = 1e-3
    NONE = 1.0
    KILO = 1e3
    MEGA = 1e6
    GIGA = 1e9
    TERA = 1e12
    PETA = 1e15
    EXA = 1e18


class SIUnit(Enum):
    """SI units used by the membrane models."""

    SECOND = "s"
    AMPERE = "A"
    VOLT = "V"
    OHM = "Ω"
    SIEMENS = "S"
    FARAD = "F"
    HERTZ = "Hz"


def to_base(value: float, prefix: MetricPrefix) -> float:
    """Converts `value` expressed with `prefix` to the base unit (e.g. mV -> V)."""
    if prefix is MetricPrefix.NONE:
        return value
    return value * prefix.value


def from_base(value: float, prefix: MetricPrefix) -> float:
    """Converts a base-unit `value` to the unit with `prefix` (e.g. V -> mV)."""
    if prefix is MetricPrefix.NONE:
        return value
    return value / prefix.value


@dataclass(frozen=True)
class PhysicalValue:
    """A quantity stored in its SI base unit."""

    base: float
    unit: SIUnit

    @classmethod
    def of(cls, value: float, prefix: MetricPrefix, unit: SIUnit) -> "PhysicalValue":
        return cls(to_base(value, prefix), unit)

    def get(self, prefix: MetricPrefix = MetricPrefix.NONE) -> float:
        return from_base(self.base, prefix)

    def __str__(self) -> str:
        return f"{self.base:g} {self.unit.value}"


def millivolts(value: float) -> float:
    return to_base(value, MetricPrefix.MILLI)


def milliseconds(value: float) -> float:
    return to_base(value, MetricPrefix.MILLI)


def megaohms(value: float) -> float:
    return to_base(value, MetricPrefix.MEGA)


# Stimuli are read as nA, potentials are reported in mV
NANOAMPERE_COEFF = to_base(1.0, MetricPrefix.NANO)
MILLIVOLT_COEFF = from_base(1.0, MetricPrefix.MILLI)
