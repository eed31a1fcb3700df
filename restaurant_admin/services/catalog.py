"""
Catalog Service

Categories, products and product addons as edited on the products page.

Rules:
    - New categories go to the end of the display order
    - A category with products cannot be deleted
    - An addon linked to a product cannot be deleted
    - A product's addons are its linked addons plus every global addon
"""

import logging
from typing import Literal, Optional

from sqlalchemy import func, or_, select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from restaurant_admin.core.errors import BusinessRuleError, NotFoundError
from restaurant_admin.models import (
    Category,
    Product,
    ProductAddon,
    ProductAddonRelation,
)
from restaurant_admin.schemas import (
    AddonCreate,
    AddonUpdate,
    CategoryCreate,
    CategoryUpdate,
    ProductCreate,
    ProductUpdate,
    ProductView,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CATEGORIES
# =============================================================================

async def list_categories(db: AsyncSession) -> list[Category]:
    result = await db.execute(select(Category).order_by(Category.display_order, Category.id))
    return list(result.scalars().all())


async def get_category(db: AsyncSession, category_id: int) -> Category:
    category = await db.get(Category, category_id)
    if category is None:
        raise NotFoundError("Category", category_id)
    return category


async def create_category(db: AsyncSession, payload: CategoryCreate) -> Category:
    display_order = payload.display_order
    if display_order is None:
        current_max = await db.scalar(select(func.max(Category.display_order)))
        display_order = (current_max or 0) + 1

    category = Category(
        name=payload.name,
        description=payload.description,
        image_url=payload.image_url,
        display_order=display_order,
    )
    db.add(category)
    await db.commit()
    await db.refresh(category)
    logger.info(f"Category #{category.id} created: {category.name} (order {display_order})")
    return category


async def update_category(db: AsyncSession, category_id: int, payload: CategoryUpdate) -> Category:
    category = await get_category(db, category_id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(category, key, value)
    await db.commit()
    await db.refresh(category)
    return category


async def delete_category(db: AsyncSession, category_id: int) -> None:
    """
    Raises:
        BusinessRuleError: If products still belong to the category
    """
    category = await get_category(db, category_id)
    product_count = await db.scalar(
        select(func.count(Product.id)).where(Product.category_id == category_id)
    )
    if product_count:
        raise BusinessRuleError(
            "Category has products",
            detail=f"Move or delete the {product_count} product(s) of '{category.name}' first",
        )
    await db.delete(category)
    await db.commit()
    logger.info(f"Category #{category_id} deleted")


async def move_category(
    db: AsyncSession,
    category_id: int,
    direction: Literal["up", "down"],
) -> list[Category]:
    """
    Swap display order with the previous ("up") or next ("down") category.

    Moving past either end is a no-op.
    """
    categories = await list_categories(db)
    index = next((i for i, c in enumerate(categories) if c.id == category_id), None)
    if index is None:
        raise NotFoundError("Category", category_id)

    neighbour_index = index - 1 if direction == "up" else index + 1
    if 0 <= neighbour_index < len(categories):
        current, neighbour = categories[index], categories[neighbour_index]
        if current.display_order == neighbour.display_order:
            # Renumber so the swap has distinct values to exchange
            for position, category in enumerate(categories, start=1):
                category.display_order = position
        current.display_order, neighbour.display_order = neighbour.display_order, current.display_order
        await db.commit()
        logger.info(f"Category #{category_id} moved {direction}")

    return await list_categories(db)


# =============================================================================
# PRODUCTS
# =============================================================================

def to_product_view(product: Product) -> ProductView:
    return ProductView(
        id=product.id,
        name=product.name,
        description=product.description,
        price=product.price,
        image_url=product.image_url,
        category_id=product.category_id,
        category_name=product.category.name if product.category else None,
        available=product.available,
        featured=product.featured,
        addon_ids=sorted(r.addon_id for r in product.addon_relations),
    )


def _product_query():
    return select(Product).options(
        selectinload(Product.category),
        selectinload(Product.addon_relations),
    )


async def list_products(
    db: AsyncSession,
    category_id: Optional[int] = None,
    available: Optional[bool] = None,
) -> list[ProductView]:
    query = _product_query().order_by(Product.name)
    if category_id is not None:
        query = query.where(Product.category_id == category_id)
    if available is not None:
        query = query.where(Product.available.is_(available))
    result = await db.execute(query)
    return [to_product_view(p) for p in result.scalars().all()]


async def _load_product(db: AsyncSession, product_id: int) -> Product:
    result = await db.execute(
        _product_query().where(Product.id == product_id).execution_options(populate_existing=True)
    )
    product = result.scalar_one_or_none()
    if product is None:
        raise NotFoundError("Product", product_id)
    return product


async def get_product(db: AsyncSession, product_id: int) -> ProductView:
    return to_product_view(await _load_product(db, product_id))


async def _check_references(db: AsyncSession, category_id: Optional[int], addon_ids: list[int]) -> None:
    if category_id is not None:
        await get_category(db, category_id)
    if addon_ids:
        result = await db.execute(select(ProductAddon.id).where(ProductAddon.id.in_(addon_ids)))
        missing = set(addon_ids) - set(result.scalars().all())
        if missing:
            raise NotFoundError("Addon", min(missing))


async def create_product(db: AsyncSession, payload: ProductCreate) -> ProductView:
    addon_ids = sorted(set(payload.addon_ids))
    await _check_references(db, payload.category_id, addon_ids)

    product = Product(
        **payload.model_dump(exclude={"addon_ids"}),
        addon_relations=[ProductAddonRelation(addon_id=a) for a in addon_ids],
    )
    db.add(product)
    await db.commit()
    logger.info(f"Product #{product.id} created: {product.name} ({product.price:.2f})")
    return to_product_view(await _load_product(db, product.id))


async def update_product(db: AsyncSession, product_id: int, payload: ProductUpdate) -> ProductView:
    """Update fields. A given addon_ids list replaces the product's addon links."""
    product = await _load_product(db, product_id)
    changes = payload.model_dump(exclude_unset=True, exclude={"addon_ids"})
    addon_ids = sorted(set(payload.addon_ids)) if payload.addon_ids is not None else None

    await _check_references(db, changes.get("category_id"), addon_ids or [])

    for key, value in changes.items():
        setattr(product, key, value)
    if addon_ids is not None:
        product.addon_relations = [ProductAddonRelation(addon_id=a) for a in addon_ids]

    await db.commit()
    logger.info(f"Product #{product_id} updated")
    return to_product_view(await _load_product(db, product_id))


async def toggle_availability(db: AsyncSession, product_id: int) -> ProductView:
    product = await _load_product(db, product_id)
    product.available = not product.available
    await db.commit()
    logger.info(f"Product #{product_id} available={product.available}")
    return to_product_view(await _load_product(db, product_id))


async def delete_product(db: AsyncSession, product_id: int) -> None:
    """Remove the addon links first, then the product."""
    product = await db.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product", product_id)
    await db.execute(delete(ProductAddonRelation).where(ProductAddonRelation.product_id == product_id))
    await db.execute(delete(Product).where(Product.id == product_id))
    await db.commit()
    logger.info(f"Product #{product_id} deleted")


# =============================================================================
# ADDONS
# =============================================================================

async def list_addons(db: AsyncSession) -> list[ProductAddon]:
    result = await db.execute(select(ProductAddon).order_by(ProductAddon.name))
    return list(result.scalars().all())


async def get_addon(db: AsyncSession, addon_id: int) -> ProductAddon:
    addon = await db.get(ProductAddon, addon_id)
    if addon is None:
        raise NotFoundError("Addon", addon_id)
    return addon


async def create_addon(db: AsyncSession, payload: AddonCreate) -> ProductAddon:
    addon = ProductAddon(**payload.model_dump())
    db.add(addon)
    await db.commit()
    await db.refresh(addon)
    logger.info(f"Addon #{addon.id} created: {addon.name}")
    return addon


async def update_addon(db: AsyncSession, addon_id: int, payload: AddonUpdate) -> ProductAddon:
    addon = await get_addon(db, addon_id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(addon, key, value)
    await db.commit()
    await db.refresh(addon)
    return addon


async def delete_addon(db: AsyncSession, addon_id: int) -> None:
    """
    Raises:
        BusinessRuleError: If the addon is linked to a product
    """
    addon = await get_addon(db, addon_id)
    links = await db.scalar(
        select(func.count(ProductAddonRelation.id)).where(ProductAddonRelation.addon_id == addon_id)
    )
    if links:
        raise BusinessRuleError(
            "Addon is in use",
            detail=f"'{addon.name}' is linked to {links} product(s)",
        )
    await db.delete(addon)
    await db.commit()
    logger.info(f"Addon #{addon_id} deleted")


async def addons_for_product(db: AsyncSession, product_id: int) -> list[ProductAddon]:
    """Available addons offered with a product: linked ones plus global ones."""
    linked = select(ProductAddonRelation.addon_id).where(ProductAddonRelation.product_id == product_id)
    result = await db.execute(
        select(ProductAddon)
        .where(
            ProductAddon.available.is_(True),
            or_(ProductAddon.is_global.is_(True), ProductAddon.id.in_(linked)),
        )
        .order_by(ProductAddon.name)
    )
    return list(result.scalars().all())
