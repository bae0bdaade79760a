"""Pipeline package: one-call processing of identifier values."""
