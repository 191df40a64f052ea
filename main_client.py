#!/usr/bin/env python3
"""
Chat Relay Client - Main Entry Point

Usage:
    python main_client.py [--username NAME] [--server-ip HOST] [--port PORT]

Options:
    --forget     Remove the remembered username and exit
"""

from client.main_client import main

if __name__ == "__main__":
    main()
