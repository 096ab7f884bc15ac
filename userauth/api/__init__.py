"""
Transport bindings for the account operations.
"""
