"""
HTTP routers for the order management API.
"""
