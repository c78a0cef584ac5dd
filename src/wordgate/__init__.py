"""
Wordgate: device-attested access to word-list generation.
"""

__version__ = "1.0.0"
