"""
Service layer - business operations over orders and accounts.
"""
