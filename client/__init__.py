"""
Client package for the real-time chat relay.

This package contains all client-side functionality including:
- Chat session state machine
- Console front end
- Configuration, identity persistence and utilities
"""
