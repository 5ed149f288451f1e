"""
SARB - Static Analysis Results Baseliner

Reports only the static analysis findings introduced since a baseline,
following baselined findings through later edits and renames using
version control history.
"""

__version__ = "1.0.0"
__author__ = "SARB Team"

from sarb.core.config import SarbConfig

__all__ = ["__version__", "SarbConfig"]
