"""
Component catalog service.
"""
import math
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_admin.exceptions import ComponentNotFoundError, InvalidComponentError
from catalog_admin.logging_config import get_logger
from catalog_admin.models import Component
from catalog_admin.schemas import ComponentPayload
from catalog_admin.static_fields import ComponentType, parse_component_type

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

SORT_COLUMNS = {
    "type": Component.type,
    "manufacturer": Component.manufacturer,
    "vendor": Component.vendor,
    "model_name": Component.model_name,
    "model_number": Component.model_number,
    "price": Component.price,
    "discounted_price": Component.discounted_price,
    "tracked_price": Component.tracked_price,
    "createdAt": Component.created_at,
    "created_at": Component.created_at,
    "updatedAt": Component.updated_at,
    "updated_at": Component.updated_at,
}

REQUIRED_FIELDS = (
    ("manufacturer", "Manufacturer is required"),
    ("model_name", "Model Name is required"),
    ("model_number", "Model Number is required"),
)

FIXED_COLUMNS = (
    "manufacturer",
    "vendor",
    "model_name",
    "model_number",
    "product_page_url",
    "image_url",
    "price",
    "discounted_price",
    "tracked_price",
)

TYPE_DATA_KEYS = ("core_custom_data", "tech_specs", "compat_specs")


def _price_out(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


def component_to_dict(component: Component, include_type_data: bool = False) -> Dict[str, Any]:
    """
    Convert a database row to the API record shape.

    With ``include_type_data`` the sub-record is attached under the
    lowercased type key, as the single-component endpoint returns it.
    """
    record: Dict[str, Any] = {
        "id": component.id,
        "type": component.type,
        "manufacturer": component.manufacturer,
        "vendor": component.vendor,
        "model_name": component.model_name,
        "model_number": component.model_number,
        "product_page_url": component.product_page_url,
        "image_url": component.image_url,
        "price": _price_out(component.price),
        "discounted_price": _price_out(component.discounted_price),
        "tracked_price": _price_out(component.tracked_price),
        "specs": component.specs or {},
        "createdAt": component.created_at.isoformat() if component.created_at else None,
        "updatedAt": component.updated_at.isoformat() if component.updated_at else None,
    }
    if include_type_data:
        record[component.type.lower()] = {"componentId": component.id, **(component.type_data or {})}
    return record


def build_type_data(payload: ComponentPayload) -> Dict[str, Any]:
    """
    Rebuild the sub-record from a payload.

    Static values sit at the top level; the dynamic maps are replaced
    wholesale, never merged with what was stored before.
    """
    type_data: Dict[str, Any] = dict(payload.compat_specs or {})
    if payload.core_custom_data is not None:
        type_data["core_custom_data"] = dict(payload.core_custom_data)
    if payload.tech_specs is not None:
        type_data["data"] = dict(payload.tech_specs)
    return type_data


class ComponentService:
    """CRUD and listing for catalog components."""

    async def list_components(
        self,
        db: AsyncSession,
        component_type: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        sort_key: str = "updatedAt",
        sort_dir: str = "desc",
    ) -> Tuple[List[Component], int, int, int]:
        """
        Return (components, total_items, total_pages, current_page).

        Unknown sort keys fall back to the last update time.
        """
        page = max(1, page)
        limit = min(max(1, limit), MAX_PAGE_SIZE)

        stmt = select(Component)
        if component_type and component_type.upper() != "ALL":
            stmt = stmt.where(Component.type == component_type.upper())
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(
                or_(
                    Component.manufacturer.ilike(pattern),
                    Component.model_name.ilike(pattern),
                    Component.model_number.ilike(pattern),
                    Component.vendor.ilike(pattern),
                )
            )

        count_stmt = select(func.count()).select_from(stmt.subquery())
        total_items = (await db.execute(count_stmt)).scalar_one()

        column = SORT_COLUMNS.get(sort_key, Component.updated_at)
        order = column.asc() if sort_dir.lower() == "asc" else column.desc()
        stmt = stmt.order_by(order, Component.id).offset((page - 1) * limit).limit(limit)

        result = await db.execute(stmt)
        components = list(result.scalars().all())
        total_pages = math.ceil(total_items / limit) if total_items else 0
        return components, total_items, total_pages, page

    async def get_component(self, db: AsyncSession, component_id: str) -> Component:
        """Fetch one component or raise ComponentNotFoundError."""
        component = await db.get(Component, component_id)
        if component is None:
            raise ComponentNotFoundError(f"Component {component_id} not found")
        return component

    async def create_component(self, db: AsyncSession, payload: ComponentPayload) -> Component:
        """Insert a new component from a recomposed payload."""
        if payload.type is None:
            raise InvalidComponentError("Component type is required")
        for key, message in REQUIRED_FIELDS:
            value = getattr(payload, key)
            if not value or not value.strip():
                raise InvalidComponentError(message)

        component = Component(
            type=payload.type.value,
            manufacturer=payload.manufacturer.strip(),
            vendor=payload.vendor or None,
            model_name=payload.model_name.strip(),
            model_number=payload.model_number.strip(),
            product_page_url=payload.product_page_url or None,
            image_url=payload.image_url or None,
            price=payload.price,
            discounted_price=payload.discounted_price,
            tracked_price=payload.tracked_price,
            specs=payload.specs or {},
            type_data=build_type_data(payload),
        )
        db.add(component)
        await db.commit()
        await db.refresh(component)
        logger.info("[DB] Created %s component %s", component.type, component.id)
        return component

    async def update_component(
        self, db: AsyncSession, component_id: str, payload: ComponentPayload
    ) -> Component:
        """
        Apply a PATCH payload. Only fields present in the body change.

        The component type is immutable; any dynamic map or static value
        in the body rebuilds the sub-record.
        """
        component = await self.get_component(db, component_id)
        provided = payload.model_dump(exclude_unset=True)

        new_type = provided.get("type")
        if new_type is not None and parse_component_type(new_type) != parse_component_type(component.type):
            raise InvalidComponentError("Component type cannot be changed")

        for key in FIXED_COLUMNS:
            if key not in provided:
                continue
            value = provided[key]
            if key in ("manufacturer", "model_name", "model_number"):
                if not value or not str(value).strip():
                    raise InvalidComponentError(dict(REQUIRED_FIELDS)[key])
                value = str(value).strip()
            elif key in ("vendor", "product_page_url", "image_url"):
                value = value or None
            setattr(component, key, value)

        if "specs" in provided:
            component.specs = payload.specs or {}
        if any(key in provided for key in TYPE_DATA_KEYS):
            component.type_data = build_type_data(payload)

        await db.commit()
        await db.refresh(component)
        logger.info("[DB] Updated component %s", component.id)
        return component

    async def delete_component(self, db: AsyncSession, component_id: str) -> None:
        """Delete a component or raise ComponentNotFoundError."""
        component = await self.get_component(db, component_id)
        await db.delete(component)
        await db.commit()
        logger.info("[DB] Deleted component %s", component_id)


def known_type(value: Optional[str]) -> Optional[ComponentType]:
    """Validate a ``type`` query parameter; "All" and empty mean no filter."""
    if not value or value.upper() == "ALL":
        return None
    return parse_component_type(value)
