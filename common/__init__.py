"""
Shared protocol definitions and constants for client and server.
"""
