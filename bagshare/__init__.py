"""
Bagshare - peer-to-peer luggage space marketplace.

Travelers offer spare baggage capacity on upcoming flights, senders post
packages that need carrying, and the matching layer pairs them and tracks
custody of each package through its four handoff checkpoints.
"""

__version__ = "1.4.0"
