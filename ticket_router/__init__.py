"""
Similar-Ticket Owner Router.

This package assigns incoming support tickets to the owner of the most
similar previously-owned ticket, using semantic embeddings and cosine
similarity, and records a report of the closest matches on the ticket.
"""

__version__ = "1.0.0"
