import logging
import sqlite3
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
import redis as _redis
from rq import Queue
from sqlalchemy import event
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

db = SQLAlchemy()
migrate = Migrate()

# Set by init_queue; redis_client stays None when Redis is unavailable
redis_client: _redis.Redis = None  # type: ignore
task_queue = None


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless asked per connection
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class InlineQueue:
    """Stand-in for the RQ queue when Redis is absent.

    ``enqueue`` accepts nothing and returns None; callers run the job
    themselves so async generations still settle.
    """

    name = "inline"

    def enqueue(self, func, *args, **kwargs):
        logger.info("No Redis queue, %s must run inline", getattr(func, "__name__", func))
        return None


def init_queue(app):
    """Connect the generation queue, falling back to InlineQueue."""
    global redis_client, task_queue
    redis_client = None
    redis_url = app.config.get("REDIS_URL", "")
    if not redis_url:
        logger.warning("REDIS_URL not set, async generations run inline")
        task_queue = InlineQueue()
        return task_queue

    try:
        client = _redis.from_url(redis_url, decode_responses=False)
        client.ping()
    except Exception as e:
        logger.warning("Redis connection failed (%s), async generations run inline", e)
        task_queue = InlineQueue()
        return task_queue

    redis_client = client
    task_queue = Queue(
        app.config.get("GENERATION_QUEUE", "generation"),
        connection=client,
        default_timeout=app.config.get("GENERATION_JOB_TIMEOUT", 600),
    )
    logger.info("Generation queue '%s' connected", task_queue.name)
    return task_queue
