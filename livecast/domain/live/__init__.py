"""
Live streaming domain logic.

Includes:
- session: Stream session management (create, status, delivery, expiry).
"""
