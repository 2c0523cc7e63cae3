"""Storefront API package: routers in ``routes``, exception handlers in ``errors``."""
