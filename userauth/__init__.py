"""
Credential and account-lifecycle authority for a user directory.
"""

__version__ = "1.0.0"
