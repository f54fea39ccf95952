"""Service categories offered to the admin service form."""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from nita.core.errors import Conflict, NotFound
from nita.models import Category


def list_categories(db: Session) -> list[Category]:
    return db.query(Category).order_by(Category.name).all()


def create_category(db: Session, name: str) -> Category:
    if db.query(Category.id).filter(Category.name == name).first() is not None:
        raise Conflict("name", f"The category '{name}' already exists.")
    category = Category(name=name)
    db.add(category)
    try:
        db.flush()
    except IntegrityError as e:
        db.rollback()
        raise Conflict("name", f"The category '{name}' already exists.") from e
    return category


def delete_category(db: Session, category_id: int) -> Category:
    """Delete a category row. Services keep their free-text category value."""
    category = db.get(Category, category_id)
    if category is None:
        raise NotFound("Category not found.")
    db.delete(category)
    db.flush()
    return category
