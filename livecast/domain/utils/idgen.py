import secrets

from ulid import ULID


def new_ulid(prefix: str | None = None) -> str:
    value = str(ULID()).lower()
    return f"{prefix}{value}" if prefix else value


def new_session_id() -> str:
    return new_ulid("st_")


def new_access_key() -> str:
    # Secret handed to the encoder; never derived from the session id
    return f"sk_{secrets.token_urlsafe(24)}"
