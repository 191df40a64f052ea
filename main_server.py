#!/usr/bin/env python3
"""
Chat Relay Server - Main Entry Point

Usage:
    python main_server.py

Optional arguments:
    --host HOST            Bind address (default: 0.0.0.0)
    --port PORT            WebSocket port (default: 8080)
    --log-dir DIR          Chat log directory (default: logs)
    --send-timeout SECS    Disconnect clients whose sends stall this long (default: 5)
"""

from server.main_server import main

if __name__ == "__main__":
    main()
