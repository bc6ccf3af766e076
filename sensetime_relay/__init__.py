"""
SenseTime Relay

Adaptor that relays OpenAI-compatible chat completion and embedding calls to
SenseTime and translates the responses back.
"""

__version__ = "0.1.0"
