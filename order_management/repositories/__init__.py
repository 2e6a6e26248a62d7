"""
Repository layer - Data access abstractions.

This layer translates domain records to and from Dataverse entities and
builds the queries issued against the store.
"""
