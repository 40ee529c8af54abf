import pytest
from decimal import Decimal
from restaurant_ordering.application.catalog_service import CatalogService
from restaurant_ordering.application.schemas import (
    CategoryCreate,
    MenuItemCreate,
    MenuItemUpdate,
    MenuFilter,
)
from restaurant_ordering.domain.errors import NotFound, ConstraintViolation

def names(items):
    return [i.name for i in items]

def test_default_listing_hides_unavailable(db, menu):
    items = CatalogService(db).list_menu_items()
    assert names(items) == ["Caesar Salad", "Grilled Chicken"]
    assert items[0].category.name == "Mains"

def test_search_is_case_insensitive(db, menu):
    items = CatalogService(db).list_menu_items(MenuFilter(search="chicken"))
    assert names(items) == ["Grilled Chicken"]

def test_search_matches_description(db, menu):
    items = CatalogService(db).list_menu_items(MenuFilter(search="PARMESAN"))
    assert names(items) == ["Caesar Salad"]

def test_search_treats_wildcards_literally(db, menu):
    assert CatalogService(db).list_menu_items(MenuFilter(search="%")) == []

def test_available_only_false_returns_everything(db, menu):
    items = CatalogService(db).list_menu_items(MenuFilter(available_only=False))
    assert names(items) == ["Caesar Salad", "Grilled Chicken", "Chocolate Cake"]

def test_filters_compose(db, menu):
    service = CatalogService(db)
    items = service.list_menu_items(MenuFilter(
        category_id=menu["mains"].id,
        min_price=Decimal("13.00"),
        max_price=Decimal("20.00"),
    ))
    assert names(items) == ["Grilled Chicken"]

    items = service.list_menu_items(MenuFilter(category_id=menu["desserts"].id, available_only=False))
    assert names(items) == ["Chocolate Cake"]

def test_price_bounds_are_inclusive(db, menu):
    items = CatalogService(db).list_menu_items(MenuFilter(
        min_price=Decimal("12.99"), max_price=Decimal("18.50")
    ))
    assert names(items) == ["Caesar Salad", "Grilled Chicken"]

def test_create_category_and_item(db):
    service = CatalogService(db)
    category = service.create_category(CategoryCreate(name="Drinks"))
    item = service.create_menu_item(MenuItemCreate(
        name="Lemonade", price=Decimal("3.50"), category_id=category.id
    ))
    assert item.id is not None
    assert item.is_available is True
    assert item.price == Decimal("3.50")
    assert [c.name for c in service.list_categories()] == ["Drinks"]

def test_create_item_with_unknown_category(db):
    with pytest.raises(ConstraintViolation):
        CatalogService(db).create_menu_item(MenuItemCreate(
            name="Ghost", price=Decimal("1.00"), category_id=999
        ))

def test_partial_update_touches_only_given_fields(db, menu):
    service = CatalogService(db)
    item = service.update_menu_item(menu["caesar"].id, MenuItemUpdate(price=Decimal("13.49")))
    assert item.price == Decimal("13.49")
    assert item.name == "Caesar Salad"
    assert item.description == "Romaine, parmesan, croutons"

def test_explicit_null_clears_optional_field(db, menu):
    item = CatalogService(db).update_menu_item(
        menu["chicken"].id, MenuItemUpdate.model_validate({"description": None})
    )
    assert item.description is None
    assert item.price == Decimal("18.50")

def test_null_for_required_field_is_rejected():
    with pytest.raises(ValueError):
        MenuItemUpdate.model_validate({"price": None})

def test_update_unknown_item(db):
    with pytest.raises(NotFound) as exc:
        CatalogService(db).update_menu_item(42, MenuItemUpdate(name="Nope"))
    assert exc.value.message == "Menu item with id 42 not found"

def test_update_item_with_unknown_category(db, menu):
    service = CatalogService(db)
    with pytest.raises(ConstraintViolation):
        service.update_menu_item(menu["caesar"].id, MenuItemUpdate(category_id=999))
    db.expire_all()
    assert service.get_menu_item(menu["caesar"].id).category_id == menu["mains"].id
