"""PitchIQ football coaching companion."""

__version__ = "0.1.0"
