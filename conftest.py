import os

# Default to SQLite for tests
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_lunch.db")
os.environ.setdefault("SWEEPER_ENABLED", "false")
