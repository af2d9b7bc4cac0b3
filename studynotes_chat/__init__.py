"""
Study Notes chat service: ephemeral study-room chat with realtime presence.
"""

__version__ = "0.1.0"
