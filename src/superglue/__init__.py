"""Push domain delegations and registrant details to the Jisc domain registry."""

__version__ = "0.1.0"
