"""
Training data for models to be profiled, keeping explanatory variables and
responses aligned.
"""

from ._sample import *
