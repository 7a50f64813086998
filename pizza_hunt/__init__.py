"""
Pizza Hunt

A pizza-ordering REST API backed by a document store, with a client-side
offline queue that stores failed creates locally and resyncs them when
connectivity comes back.
"""

__version__ = "1.0.0"
