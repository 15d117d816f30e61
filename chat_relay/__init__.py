"""
Chat Relay.

Real-time chat relay over WebSocket: clients pick a display name and every
message is fanned out to all connected clients.
"""

__version__ = "0.1.0"
