# File: localizable/api/endpoints/__init__.py
"""
API endpoints package for Localizable.
"""

from localizable.api.endpoints import localizations
