"""
Server package for the real-time chat relay.

This package contains all server-side functionality including:
- WebSocket connection handling
- Connection registry and broadcast relay
- Configuration and utilities
"""
