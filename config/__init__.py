"""
Catalog search configuration package.

Re-exports all public classes and functions.
"""

from config.search_config import SearchConfig, DEFAULTS
