"""
Pydantic schemas: API-facing entities, paged results, the service
response envelope and request payloads.
"""
