"""Quiz domain services: scoring, drawings, the score ledger and rankings.

This package contains the domain logic that HTTP routes and socket
handlers import, keeping transport concerns separated from scoring and
storage rules.
"""
