"""
medreport - Instant Medical Report Generator
"""

__version__ = "1.0.0"
__author__ = "medreport Team"
__description__ = "Live medical report form with paginated preview and PDF export"

from medreport import app
from medreport import utils

__all__ = [
    "app",
    "utils",
    "__version__",
    "__author__",
    "__description__",
]
