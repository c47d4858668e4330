from __future__ import annotations


# PUBLIC_INTERFACE
class PersistenceError(RuntimeError):
    """
    Raised when the backing storage refuses or fails a write.

    The in-memory collection stays authoritative for the current session when
    this is raised; callers decide whether to warn the user.
    """
