"""
Unit tests for the rate-limit fallback service.

Test individual components in isolation:
- Data models (model identifiers, retry state, host events, prompt payloads)
- Pattern matcher and rotation policy
- Prompt reconstruction from the last user message
- Recovery orchestrator and event dispatcher (mocked session client)
- Config discovery/loading and the fallback event log
- HTTP session client (httpx MockTransport)
"""
