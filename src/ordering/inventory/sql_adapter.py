"""SQL-backed inventory ledger using SQLAlchemy Core.

Stock moves through one conditional ``UPDATE ... WHERE stock + :delta >= 0``
per call, so the database's row lock is the only synchronisation needed and
two processes sharing the table can never oversell.
"""

import structlog
from sqlalchemy import (
    Boolean,
    Column,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Engine

from ordering.errors import InsufficientStock, ProductNotFound
from ordering.inventory.port import InventoryLedger, ProductSnapshot

logger = structlog.get_logger(__name__)

metadata = MetaData()

products = Table(
    "inventory_products",
    metadata,
    Column("product_id", String(64), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("price", Float, nullable=False),
    Column("stock", Integer, nullable=False),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("image", String(500)),
)


def _snapshot(row) -> ProductSnapshot:
    return ProductSnapshot(
        product_id=row.product_id,
        name=row.name,
        price=row.price,
        stock=row.stock,
        is_active=row.is_active,
        image=row.image,
    )


class SqlInventoryLedger(InventoryLedger):
    def __init__(self, database_uri: str | None = None, engine: Engine | None = None) -> None:
        if engine is None:
            if not database_uri:
                raise ValueError("SqlInventoryLedger needs a database_uri or an engine")
            engine = create_engine(database_uri)
        self._engine = engine

    def create_schema(self) -> None:
        metadata.create_all(self._engine)

    def drop_schema(self) -> None:
        metadata.drop_all(self._engine)

    def add_product(
        self,
        product_id: str,
        name: str,
        price: float,
        stock: int,
        is_active: bool = True,
        image: str | None = None,
    ) -> ProductSnapshot:
        values = {
            "product_id": str(product_id),
            "name": name,
            "price": price,
            "stock": stock,
            "is_active": is_active,
            "image": image,
        }
        with self._engine.begin() as conn:
            conn.execute(insert(products).values(**values))
        return ProductSnapshot(**values)

    def get_product(self, product_id: str) -> ProductSnapshot | None:
        with self._engine.connect() as conn:
            row = conn.execute(select(products).where(products.c.product_id == str(product_id))).first()
        return _snapshot(row) if row is not None else None

    def stock_of(self, product_id: str) -> int:
        product = self.get_product(product_id)
        if product is None:
            raise ProductNotFound(product_id)
        return product.stock

    def adjust_stock(self, product_id: str, delta: int) -> int:
        product_id = str(product_id)
        stock_query = select(products.c.stock).where(products.c.product_id == product_id)

        with self._engine.begin() as conn:
            result = conn.execute(
                update(products)
                .where(products.c.product_id == product_id)
                .where(products.c.stock + delta >= 0)
                .values(stock=products.c.stock + delta)
            )
            current = conn.execute(stock_query).scalar()

            if result.rowcount == 0:
                if current is None:
                    raise ProductNotFound(product_id)
                raise InsufficientStock(product_id, current, -delta)

        logger.debug("stock_adjusted", product_id=product_id, delta=delta, stock=current)
        return current
