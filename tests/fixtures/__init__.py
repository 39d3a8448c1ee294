"""
Test fixtures for the rate-limit fallback service.

- sessions.py: FakeClock, RecordingSessionClient and host payload builders
  (session messages, retry / idle / deleted events)
"""
