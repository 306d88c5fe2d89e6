"""Shared Kernel module.

Holds the authorization core (relationship tuples, permission cache,
authorization client and the SpiceDB adapter) and the observation context
that probes use. The IAM context and the platform wiring both depend on it,
so it must not import either of them.
"""
