import os
from dataclasses import dataclass

from dotenv import load_dotenv

from albumdb.errors import ConnectError

# Load the appropriate .env file on module import
env = os.environ.get("ALBUMDB_ENV", "development").lower()
env_file = f".env.{env}"
if os.path.exists(env_file):
    env_loaded = load_dotenv(env_file)
else:
    # Fall back to the default .env file
    env_loaded = load_dotenv()


def connection_url(user: str, password: str, host: str, port: int, name: str) -> str:
    """
    Build a postgres:// connection descriptor.

    User and password are inserted verbatim: a password containing ``@``,
    ``:`` or ``/`` produces a descriptor that will not parse.
    """
    return f"postgres://{user}:{password}@{host}:{port}/{name}"


@dataclass
class Config:
    environment: str
    db_user: str
    db_password: str
    db_host: str
    db_port: str
    db_name: str
    probe_interval: float = 1.0
    url_override: str | None = None

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            environment=env,
            db_user=os.environ.get("DB_USER", ""),
            db_password=os.environ.get("DB_PASSWD", ""),
            db_host=os.environ.get("DB_HOST", "localhost"),
            db_port=os.environ.get("DB_PORT") or "5432",
            db_name=os.environ.get("DB_NAME", ""),
            probe_interval=float(os.environ.get("DB_PROBE_INTERVAL") or 1.0),
            url_override=os.environ.get("DATABASE_URL") or None,
        )

    @property
    def database_url(self) -> str:
        """
        The connection descriptor.

        Raises:
            ConnectError: if DB_PORT is not an integer
        """
        if self.url_override:
            return self.url_override
        try:
            port = int(self.db_port)
        except ValueError as e:
            raise ConnectError(f"invalid DB_PORT {self.db_port!r}: not an integer") from e
        return connection_url(self.db_user, self.db_password, self.db_host, port, self.db_name)


config = Config.from_env()
