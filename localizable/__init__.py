"""
Localizable: per-entity, per-locale text overrides stored beside a host
application's own records.
"""

__version__ = "1.0.0"
