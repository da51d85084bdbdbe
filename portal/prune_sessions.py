"""
CLI entrypoint for the expired-session cleanup job. Run from cron, e.g.:

  python -m portal.prune_sessions

Or hourly: 0 * * * * cd /path/to/portal && .venv/bin/python -m portal.prune_sessions
"""

import logging
import sys

from portal.core.config import get_settings
from portal.core.database import SessionLocal
from portal.core.logging_config import configure_logging
from portal.services.sessions import SessionStore

logger = logging.getLogger(__name__)


def main() -> int:
    """Delete sessions whose expiry has passed."""
    configure_logging(get_settings().LOG_LEVEL)
    db = SessionLocal()
    try:
        deleted = SessionStore(db).prune_expired()
        logger.info("Session prune completed: sessions_deleted=%s", deleted)
        return 0
    except Exception as e:
        logger.exception("Session prune failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
