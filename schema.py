from sqlalchemy import (
    Column,
    Integer,
    BigInteger,
    String,
    Float,
    Text,
    DateTime,
)
from sqlalchemy.orm import declarative_base


Base = declarative_base()

META_ID = 1


class Country(Base):
    __tablename__ = "countries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True, index=True)
    capital = Column(String(255), nullable=True)
    region = Column(String(255), nullable=True)
    population = Column(BigInteger, nullable=False)
    currency_code = Column(String(16), nullable=True)
    exchange_rate = Column(Float, nullable=True)
    estimated_gdp = Column(Float, nullable=False, default=0)
    flag_url = Column(String(1024), nullable=True)
    last_refreshed_at = Column(DateTime(timezone=True), nullable=False)


class Meta(Base):
    """Singleton row (id=1) describing the last refresh."""

    __tablename__ = "meta"

    id = Column(Integer, primary_key=True, default=META_ID)
    total_countries = Column(Integer, nullable=False, default=0)
    last_refreshed_at = Column(DateTime(timezone=True), nullable=False)
    summary_svg = Column(Text, nullable=True)
