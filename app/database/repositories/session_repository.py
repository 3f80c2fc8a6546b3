from app.database.connection import get_connection
from app.logging.logger import Log
from app.purge.session import SessionTerminator


class SessionRepository(SessionTerminator):
    """Database operations for the sessions table."""

    def terminate(self, user_id: int) -> None:
        """Delete every session token of the user."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM sessions WHERE user_id = %s", (user_id,))
                deleted = cur.rowcount
            conn.commit()
        Log.info(f"Terminated {deleted} sessions for user {user_id}")
