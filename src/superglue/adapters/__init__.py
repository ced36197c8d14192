"""Adapters to the outside world: the registry web site over HTTP."""
