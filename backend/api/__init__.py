"""
RFD Index API package.

Provides the FastAPI application (`api.app:app`) for the RFD tracker.
"""
