"""
Rate-limit fallback for interactive AI coding sessions.

Watches session lifecycle events from the host. When a session's request is
throttled by its model provider, the last user request is resubmitted on a
fallback model:

- Detection: status messages matched against rate/usage-limit patterns
- Cooldown: repeated triggers for the same session are suppressed
- Rotation: fallback → main model → fallback → remaining fallbacks
- Recovery: abort → fetch history → revert → resubmit

Architecture: event dispatcher + per-session state machine + host session client
"""

__version__ = "0.1.0"
