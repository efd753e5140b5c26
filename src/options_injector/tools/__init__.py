"""
Tools Package.

Shared utility module management and source formatter backends.
"""
