"""
Login rate limiter against an in-memory stand-in for the Redis sorted-set
commands it uses.
"""
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

MAX_ATTEMPTS = 3


class FakePipeline:
    def __init__(self, redis):
        self.redis = redis
        self.ops = []

    def zremrangebyscore(self, key, low, high):
        self.ops.append(("zremrangebyscore", key, low, high))

    def zcard(self, key):
        self.ops.append(("zcard", key))

    def zadd(self, key, mapping):
        self.ops.append(("zadd", key, mapping))

    def expire(self, key, seconds):
        self.ops.append(("expire", key, seconds))

    async def execute(self):
        if self.redis.down:
            raise RedisConnectionError("Error 111 connecting to redis:6379. Connection refused.")
        return [getattr(self.redis, op)(*args) for op, *args in self.ops]


class FakeRedis:
    def __init__(self):
        self.sets: dict[str, dict[str, float]] = {}
        self.ttls: dict[str, int] = {}
        self.down = False

    def pipeline(self):
        return FakePipeline(self)

    def zremrangebyscore(self, key, low, high):
        members = self.sets.get(key, {})
        stale = [m for m, score in members.items() if score <= high]
        for member in stale:
            del members[member]
        return len(stale)

    def zcard(self, key):
        return len(self.sets.get(key, {}))

    def zadd(self, key, mapping):
        self.sets.setdefault(key, {}).update(mapping)
        return len(mapping)

    def expire(self, key, seconds):
        self.ttls[key] = seconds
        return True

    async def ping(self):
        return True


@pytest.fixture
def settings(settings):
    return settings.model_copy(update={"RATE_LIMIT_ENABLED": True, "RATE_LIMIT_MAX_ATTEMPTS": MAX_ATTEMPTS})


@pytest.fixture
def redis(app):
    fake = FakeRedis()
    app.state.redis = fake
    return fake


async def attempt(client, email="a@nitc.ac.in"):
    return await client.post("/api/v1/users/login", json={"email": email, "password": "WrongPass12"})


@pytest.mark.asyncio
async def test_blocks_after_max_attempts(client, register, redis):
    await register()
    for _ in range(MAX_ATTEMPTS):
        assert (await attempt(client)).status_code == 401

    r = await attempt(client)
    assert r.status_code == 429
    assert r.json()["status"] == "fail"
    assert r.headers["Retry-After"] == "60"
    assert redis.ttls["ratelimit:login:a@nitc.ac.in"] == 61


@pytest.mark.asyncio
async def test_limit_is_per_email(client, redis):
    for _ in range(MAX_ATTEMPTS):
        await attempt(client, "A@nitc.ac.in")
    assert (await attempt(client, "a@nitc.ac.in")).status_code == 429
    assert (await attempt(client, "b@nitc.ac.in")).status_code == 400


@pytest.mark.asyncio
async def test_other_routes_are_not_limited(client, redis):
    for _ in range(MAX_ATTEMPTS + 2):
        r = await client.post("/api/v1/users/forgotPassword", json={"email": "a@nitc.ac.in"})
        assert r.status_code == 404
    assert redis.sets == {}


@pytest.mark.asyncio
async def test_health_reports_redis(client, redis):
    r = await client.get("/health")
    assert r.json()["dependencies"] == {"database": "ok", "redis": "ok"}


@pytest.mark.asyncio
async def test_unreachable_redis_lets_logins_through(client, register, login, redis):
    await register()
    redis.down = True

    for _ in range(MAX_ATTEMPTS + 1):
        assert (await attempt(client)).status_code == 401
    assert await login()
