"""Prompting package.

This package contains deterministic request-body helpers used by the remote model
transports. It does not perform routing, window bookkeeping, or model invocation.
"""
