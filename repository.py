from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from schema import Country, Meta, META_ID

COUNTRY_FIELDS = (
    "name",
    "capital",
    "region",
    "population",
    "currency_code",
    "exchange_rate",
    "estimated_gdp",
    "flag_url",
    "last_refreshed_at",
)


class CountryRepository:
    """Country rows keyed by name. Never commits; the caller owns the transaction."""

    def __init__(self, session: Session):
        self.session = session

    def _find(self, name: str, for_update: bool = False) -> Optional[Country]:
        q = self.session.query(Country)
        if for_update:
            q = q.with_for_update()
        exact = q.filter(Country.name == name).first()
        if exact is not None:
            return exact
        # lower() on both sides: SQLite only folds ASCII, so folding one side
        # in Python would miss names like "Åland Islands"
        return q.filter(func.lower(Country.name) == func.lower(name)).first()

    def upsert(self, data: dict) -> Country:
        # row lock on backends that support it, so writes for one name serialize
        existing = self._find(data["name"], for_update=True)
        values = {k: data.get(k) for k in COUNTRY_FIELDS}
        if existing:
            for k, v in values.items():
                setattr(existing, k, v)
            return existing
        country = Country(**values)
        self.session.add(country)
        # later lookups in the same transaction must see the new row
        self.session.flush()
        return country

    def get_by_name(self, name: str) -> Optional[Country]:
        return self._find(name)

    def list_all(
        self,
        region: Optional[str] = None,
        currency: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> List[Country]:
        q = self.session.query(Country)
        if region:
            q = q.filter(Country.region == region)
        if currency:
            q = q.filter(Country.currency_code == currency)
        if sort == "gdp_desc":
            q = q.order_by(Country.estimated_gdp.desc(), Country.id)
        elif sort == "gdp_asc":
            q = q.order_by(Country.estimated_gdp.asc(), Country.id)
        else:
            q = q.order_by(Country.id)
        return q.all()

    def delete_by_name(self, name: str) -> int:
        country = self._find(name)
        if country is None:
            return 0
        self.session.delete(country)
        return 1

    def count(self) -> int:
        return self.session.query(func.count(Country.id)).scalar() or 0


class MetaStore:
    def __init__(self, session: Session):
        self.session = session

    def get(self) -> Optional[Meta]:
        return self.session.get(Meta, META_ID)

    def upsert(self, total_countries: int, last_refreshed_at: datetime, summary_svg: str) -> Meta:
        meta = self.get()
        if meta is None:
            meta = Meta(id=META_ID)
            self.session.add(meta)
        meta.total_countries = total_countries
        meta.last_refreshed_at = last_refreshed_at
        meta.summary_svg = summary_svg
        return meta
