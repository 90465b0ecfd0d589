from flask_cors import CORS
import redis

cors = CORS()


class RedisClient:
    """Lazily connected Redis handle, only used when USAGE_STORE=redis."""

    def __init__(self):
        self.client = None

    def init_app(self, app):
        self.client = None
        if (app.config.get("USAGE_STORE") or "memory").lower() != "redis":
            return

        redis_url = app.config.get("REDIS_URL")
        if not redis_url:
            app.logger.warning("RedisClient: REDIS_URL is not configured.")
            return

        redis_kwargs = app.config.get("REDIS_CONNECTION_KWARGS", {}).copy()
        redis_kwargs.setdefault("decode_responses", True)

        try:
            self.client = redis.from_url(redis_url, **redis_kwargs)
            self.client.ping()
            app.logger.info(f"RedisClient: connected to {redis_url.split('@')[-1]}")
        except redis.exceptions.RedisError as e:
            app.logger.error(f"RedisClient: failed to connect to Redis: {e}")
            self.client = None


redis_client = RedisClient()
