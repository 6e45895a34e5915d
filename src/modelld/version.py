"""Version information for :mod:`modelld`."""

VERSION = "0.12.0"
