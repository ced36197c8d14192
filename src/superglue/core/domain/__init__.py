"""Domain models: delegations, name servers, registrant fields and plans.

Pure pydantic v2 structures; nothing here knows about HTTP or the CLI.
"""
