from .session import Session, new_session

__all__ = ["Session", "new_session"]
