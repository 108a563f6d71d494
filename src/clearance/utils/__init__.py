"""
Contains some useful utility functions to be used in rules.
"""
from .query_peer import optional_peer, required_peer
