"""
Fast peer selection for blockchain nodes.

Asks a node for its active peers over JSON-RPC, times a TCP connect to
each of them, and ranks the fastest into a persistent-peer list.
"""

__version__ = "0.1.0"
