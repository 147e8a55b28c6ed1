"""Live engine sensor dashboard fed from serial frames or recorded logs."""

__version__ = "0.1.0"