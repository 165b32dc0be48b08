"""
Domain layer containing core business logic and domain services.

Submodules:
- live: Stream session lifecycle (store access, ingest-driven transitions, expiry).
- playback: Client-side playback controller with bounded reconnect.
- utils: Domain-specific utilities (e.g., ID generation).
"""
