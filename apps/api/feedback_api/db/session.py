from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from feedback_api.core.config import settings

url = make_url(settings.DATABASE_URL)
backend = url.get_backend_name()

connect_args = {}
engine_kwargs = {}
if backend.startswith("postgresql"):
    connect_args["options"] = "-c timezone=utc"
elif backend == "sqlite":
    connect_args["check_same_thread"] = False
    if url.database in (None, "", ":memory:"):
        # In-memory databases only live as long as their connection
        engine_kwargs["poolclass"] = StaticPool

engine = create_engine(
    settings.DATABASE_URL, pool_pre_ping=True, connect_args=connect_args, **engine_kwargs
)

if backend == "sqlite":

    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        # ON DELETE CASCADE is ignored by SQLite unless this is on per connection
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
