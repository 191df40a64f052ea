"""
Chat module for client-side messaging functionality.

Handles:
- Connection lifecycle (join / leave)
- Sending chat messages
- Classifying inbound messages as own, others' or system notices
"""
