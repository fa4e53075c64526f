"""
Core infrastructure: configuration, logging, database plumbing,
storage contexts and the per-unit-of-work service factory.
"""
