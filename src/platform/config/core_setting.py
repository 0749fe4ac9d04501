from decimal import Decimal
from pathlib import Path
from typing import List, Literal

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Trip Booking Core'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = []  # add your frontend URL here

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and not v.startswith('['):
            return [i.strip() for i in v.split(',')]
        elif isinstance(v, list):
            return v
        return []

    # Storage backend: 'sqlalchemy' for PostgreSQL (or any async URL), 'memory' for local demos
    STORAGE_BACKEND: Literal['sqlalchemy', 'memory'] = 'sqlalchemy'

    # PostgreSQL
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: SecretStr = SecretStr('postgres')
    POSTGRES_DB: str = 'trip_booking'
    POSTGRES_PORT: str = '5432'
    DATABASE_URL: str = ''  # Full async URL override (e.g. sqlite+aiosqlite:///./dev.db)

    # Connection pool
    DB_POOL_SIZE: int = 10
    DB_POOL_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: int = 30  # seconds
    DB_POOL_RECYCLE: int = 3600  # seconds
    DB_POOL_PRE_PING: bool = True

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        password = self.POSTGRES_PASSWORD.get_secret_value()
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:{password}'
            f'@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'
        )

    # Reservation transaction
    RESERVATION_MAX_RETRIES: int = 3  # attempts on optimistic-lock conflict
    STORAGE_TIMEOUT_SECONDS: float = 5.0  # per attempt, before commit
    MAX_SEATS_PER_BOOKING: int = 5
    DEFAULT_TOTAL_SEATS: int = 60  # fallback when a trip has no seat counts

    # Pricing policy
    SERVICE_FEE: Decimal = Decimal('0')  # fixed fee added once per booking
    AMOUNT_TOLERANCE: Decimal = Decimal('0.01')
    ENFORCE_AMOUNT_MATCH: bool = True

    # Booking policy
    AUTO_CONFIRM_BOOKINGS: bool = False
    REQUIRE_PASSENGER_CONTACT: bool = True  # email or id_number per passenger


settings = Settings()  # type: ignore
