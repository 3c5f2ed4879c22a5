"""
browserpack - Node-style module wrapping for browser bundles.

Resolves package mains and browser field overrides, names modules
canonically, and emits self-registering module units plus the alias table
the bundle runtime uses to resolve specifiers without a filesystem.
"""

__version__ = "1.0.0"
