"""Contracts the core depends on.

`RegistrarGateway` is implemented by the HTTP adapter and, in tests, by an
in-memory fake; the services never import an adapter directly.
"""
