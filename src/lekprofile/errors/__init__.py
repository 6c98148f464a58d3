"""
Exceptions raised when adapting models and computing Lek profiles.
"""

from ._errors import *
