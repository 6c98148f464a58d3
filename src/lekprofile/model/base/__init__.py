"""
Base classes for model adapters.
"""

from ._adapter import *
