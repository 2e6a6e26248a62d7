"""
Infrastructure layer - Dataverse Web API client and connection handling.
"""
