"""
RD Credit Pro - federal R&D tax credit estimate engine and API.
"""

__version__ = "1.0.0"
