"""
Relay module for server-side message fan-out.

Handles:
- Connection registry
- Welcome notices for new connections
- Timestamping and broadcasting chat messages
- Graceful shutdown
"""
