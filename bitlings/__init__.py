"""Bitlings: community-voted creature proposals, generated stats and collections."""

__version__ = "0.1.0"
