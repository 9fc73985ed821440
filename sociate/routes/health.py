"""
Health check endpoints for monitoring system status.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from sociate import __version__
from sociate.db import get_session

router = APIRouter(prefix="/health", tags=["health"])


def check_database_health() -> Dict[str, str]:
    """
    Check database connectivity.

    Returns:
        Dict with status and optional error details
    """
    try:
        with get_session() as db:
            result = db.execute(text("SELECT 1")).scalar()
            if result == 1:
                return {"status": "ok"}
            return {"status": "down", "error": "Unexpected query result"}
    except SQLAlchemyError as e:
        return {"status": "down", "error": f"Database error: {str(e)}"}


@router.get("/")
def health_check() -> Dict[str, Any]:
    """
    Overall health: "ok" when the store answers, "down" otherwise.
    """
    db_health = check_database_health()
    return {
        "status": "ok" if db_health["status"] == "ok" else "down",
        "db": db_health,
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/db")
def database_health() -> Dict[str, Any]:
    """
    Database health plus row counts of the main tables.
    """
    health_status = check_database_health()

    try:
        with get_session() as db:
            user_count = db.execute(text("SELECT COUNT(*) FROM users")).scalar()
            post_count = db.execute(text("SELECT COUNT(*) FROM posts")).scalar()
            message_count = db.execute(text("SELECT COUNT(*) FROM messages")).scalar()

            health_status.update({
                "tables": {
                    "users": user_count,
                    "posts": post_count,
                    "messages": message_count,
                },
                "timestamp": datetime.now(timezone.utc).isoformat(),
            })
    except SQLAlchemyError as e:
        health_status["error"] = f"Extended check failed: {str(e)}"

    return health_status
