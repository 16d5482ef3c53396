from __future__ import annotations

from ..extensions import db
from ..storage import records


class Category(db.Model):
    __tablename__ = "categories"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    color = db.Column(db.String(16), nullable=False, default="#2F80ED")
    created_at = db.Column(db.DateTime, nullable=False)

    def to_record(self) -> records.Category:
        return records.Category(
            id=self.id,
            name=self.name,
            color=self.color,
            created_at=self.created_at,
        )


class Product(db.Model):
    """
    Sellable item.

    STOCK: NULL means untracked (unlimited). A tracked stock is only lowered
    by checkout through a conditional UPDATE, never read-modify-write.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_category_id", "category_id"),
        db.Index("ix_products_barcode", "barcode"),
        db.CheckConstraint("stock IS NULL OR stock >= 0", name="ck_products_stock_non_negative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)

    # Authoritative storage in cents (API formats as "12.34")
    price_cents = db.Column(db.Integer, nullable=False)

    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=True)
    barcode = db.Column(db.String(64), nullable=True)
    image = db.Column(db.Text, nullable=True)
    stock = db.Column(db.Integer, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False)

    category = db.relationship("Category", backref=db.backref("products", lazy=True))

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} stock={self.stock}>"

    def to_record(self) -> records.Product:
        return records.Product(
            id=self.id,
            name=self.name,
            price_cents=self.price_cents,
            category_id=self.category_id,
            barcode=self.barcode,
            image=self.image,
            stock=self.stock,
            is_active=bool(self.is_active),
            created_at=self.created_at,
        )
