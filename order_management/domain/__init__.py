"""
Domain layer - Core business entities and domain logic.

This layer contains the order and account records and the rules that
apply to them, independent of any infrastructure or framework concerns.
"""
