from functools import wraps
from typing import Callable
from sqlalchemy.exc import SQLAlchemyError
from loguru import logger
from utils.exceptions import NotAuthorized, StoreUnavailable

def owner_required(func: Callable) -> Callable:
    """Rejects the call when the acting owner identity is missing. Expects (session, owner_id, ...)."""
    @wraps(func)
    async def wrapper(session, owner_id, *args, **kwargs):
        if not owner_id:
            logger.warning(f"Rejected {func.__name__}: no owner identity")
            raise NotAuthorized("You must be signed in to manage a menu")
        return await func(session, owner_id, *args, **kwargs)
    
    return wrapper

def store_errors(func: Callable) -> Callable:
    """Rolls the session back and turns backend failures into StoreUnavailable."""
    @wraps(func)
    async def wrapper(session, *args, **kwargs):
        try:
            return await func(session, *args, **kwargs)
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Relational store error in {func.__name__}: {e}", exc_info=True)
            raise StoreUnavailable(str(e)) from e
    
    return wrapper
