# File: localizable/api/__init__.py
"""
API package for Localizable.

This package contains the HTTP layer: endpoints, dependencies, and routing
configuration.
"""
