"""Marketplace — accounts and owner-scoped item listings.

A small FastAPI backend: users register and log in with a password,
receive a signed session token, and manage the item listings they own.
Anyone may browse listings; only the owner may change them.
"""

__version__ = "0.1.0"
