"""
Order Management Service.

REST API for orders and accounts backed by Microsoft Dataverse.
"""

__version__ = "1.0.0"
