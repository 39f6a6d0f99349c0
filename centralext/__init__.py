"""Conversion of device profiles and devices to and from xlsx, and a system management client."""

__version__ = "0.1.0"