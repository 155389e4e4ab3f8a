"""Service catalog: the Services bounded context of the barbershop platform."""

__version__ = "1.0.0"
