"""Ambient plumbing shared by the client and the pool: config and logging."""
