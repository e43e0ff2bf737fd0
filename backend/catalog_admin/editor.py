"""
In-memory edit surface for catalog components.

``EditSession`` holds one component being created or edited: fixed fields
as form values, static technical values, the two dynamic field lists and
the extra-spec rows. Network calls happen only in ``save`` and
``autofill_from_url``; a failed call leaves the edit state untouched and
records a notification instead of raising.

``CatalogBrowser`` is the list view around it: filters, paging, opening a
component for editing and deleting.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from catalog_admin.client import CatalogClient
from catalog_admin.exceptions import CatalogAPIError
from catalog_admin.fields import (
    FieldType,
    Section,
    TypedField,
    coerce_boolean,
    coerce_integer,
    default_value,
    join_array,
    normalize_key,
)
from catalog_admin.logging_config import get_logger
from catalog_admin.reconcile import (
    FIXED_TEXT_FIELDS,
    PRICE_FIELDS,
    ExtraSpec,
    StorageShape,
    decompose,
    recompose,
)
from catalog_admin.schemas import ComponentPage, PageMeta
from catalog_admin.static_fields import (
    ComponentType,
    coerce_static_value,
    get_static_fields,
    parse_component_type,
    static_keys,
)

logger = get_logger(__name__)

DEFAULT = "default"
DESTRUCTIVE = "destructive"

FIXED_FIELDS = FIXED_TEXT_FIELDS + PRICE_FIELDS

REQUIRED_FIXED = (
    ("manufacturer", "Manufacturer is required"),
    ("model_name", "Model Name is required"),
    ("model_number", "Model Number is required"),
)


@dataclass
class Notification:
    """User-visible message (a toast in a UI)."""

    title: str
    description: str
    variant: str = DEFAULT

    @property
    def is_error(self) -> bool:
        return self.variant == DESTRUCTIVE


class AddFieldDialog:
    """
    Modal state for adding a dynamic field.

    closed -> open(section, name="", type=string) -> submit -> closed.
    Submitting a blank name does nothing; cancel drops the draft.
    """

    def __init__(self) -> None:
        self.is_open = False
        self.section = Section.CORE_IDENTITY
        self.name = ""
        self.type = FieldType.STRING

    def open(self, section: Section = Section.CORE_IDENTITY) -> None:
        self.is_open = True
        self.section = section
        self.name = ""
        self.type = FieldType.STRING

    def set_name(self, name: str) -> None:
        self.name = name

    def set_type(self, field_type: Union[FieldType, str]) -> None:
        self.type = FieldType(field_type)

    @property
    def draft_key(self) -> str:
        return normalize_key(self.name)

    def submit(self) -> Optional[TypedField]:
        """Create the field, or return None and stay open when the name is blank."""
        if not self.is_open or not self.name.strip():
            return None
        new_field = TypedField(
            key=self.draft_key,
            type=self.type,
            value=default_value(self.type),
            section=self.section,
        )
        self.cancel()
        return new_field

    def cancel(self) -> None:
        self.is_open = False
        self.section = Section.CORE_IDENTITY
        self.name = ""
        self.type = FieldType.STRING


class EditSession:
    """One component being created or edited."""

    def __init__(
        self,
        component_type: Union[ComponentType, str, None] = None,
        record_id: Optional[str] = None,
        is_creating: bool = True,
    ) -> None:
        self.record_id = record_id
        self.component_type: Optional[ComponentType] = parse_component_type(component_type)
        self.is_creating = is_creating
        self.edit_mode = is_creating
        self.shape = StorageShape.SEPARATED

        self.fixed: Dict[str, Any] = {key: "" for key in FIXED_FIELDS}
        self.static_values: Dict[str, Any] = {}
        self.core_identity_fields: List[TypedField] = []
        self.technical_spec_fields: List[TypedField] = []
        self.extra_specs: List[ExtraSpec] = []

        self.dialog = AddFieldDialog()
        self.notifications: List[Notification] = []
        self.saving = False
        self.fetching_specs = False
        self.saved_record: Optional[Dict[str, Any]] = None

    @classmethod
    def new(cls, component_type: Union[ComponentType, str, None] = None) -> "EditSession":
        """Session for a component that does not exist yet (starts in edit mode)."""
        return cls(component_type=component_type, is_creating=True)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "EditSession":
        """Session for a stored record, with dynamic fields decomposed."""
        decomposed = decompose(record)
        session = cls(
            component_type=decomposed.component_type,
            record_id=record.get("id"),
            is_creating=False,
        )
        for key in FIXED_FIELDS:
            value = record.get(key)
            session.fixed[key] = "" if value is None else value
        session.static_values = dict(decomposed.static_values)
        session.core_identity_fields = decomposed.core_identity_fields
        session.technical_spec_fields = decomposed.technical_spec_fields
        session.extra_specs = decomposed.extra_specs
        session.shape = decomposed.shape
        logger.info(
            "[Session] Loaded %s %s (%s shape): %d core, %d technical fields",
            session.component_type.value if session.component_type else "untyped",
            session.record_id,
            session.shape.value,
            len(session.core_identity_fields),
            len(session.technical_spec_fields),
        )
        return session

    # -- notifications ---------------------------------------------------

    def notify(self, title: str, description: str, variant: str = DEFAULT) -> Notification:
        notification = Notification(title=title, description=description, variant=variant)
        self.notifications.append(notification)
        return notification

    @property
    def last_notification(self) -> Optional[Notification]:
        return self.notifications[-1] if self.notifications else None

    # -- fixed and static fields -------------------------------------------

    def begin_edit(self) -> None:
        self.edit_mode = True

    def set_fixed(self, key: str, value: Any) -> None:
        if key not in FIXED_FIELDS:
            raise KeyError(f"Not a fixed field: {key}")
        self.fixed[key] = value

    def set_component_type(self, component_type: Union[ComponentType, str]) -> None:
        """Pick the type of a new component. Stored components keep theirs."""
        if not self.is_creating:
            raise ValueError("Component type cannot be changed after creation")
        resolved = parse_component_type(component_type)
        if resolved is None:
            raise ValueError(f"Unknown component type: {component_type!r}")
        self.component_type = resolved

    def set_static_value(self, key: str, value: Any) -> None:
        if key not in static_keys(self.component_type):
            raise KeyError(f"{key} is not a static field of {self.component_type}")
        self.static_values[key] = value

    # -- dynamic fields ------------------------------------------------------

    def fields(self, section: Section) -> List[TypedField]:
        if section == Section.TECHNICAL_SPECS:
            return self.technical_spec_fields
        return self.core_identity_fields

    def open_add_field(self, section: Section = Section.CORE_IDENTITY) -> None:
        self.dialog.open(section)

    def cancel_add_field(self) -> None:
        self.dialog.cancel()

    def submit_add_field(self) -> Optional[TypedField]:
        """
        Append the dialog's draft to its section.

        A key that matches a static field of the type or an existing dynamic
        field is refused with a notification and the dialog stays open.
        """
        if self.dialog.is_open and self.dialog.name.strip():
            key = self.dialog.draft_key
            if key in static_keys(self.component_type):
                self.notify("Error", f'"{key}" is already a standard field for this component type')
                return None
            existing = {f.key for f in self.core_identity_fields + self.technical_spec_fields}
            if key in existing:
                self.notify("Error", f'A field named "{key}" already exists')
                return None

        new_field = self.dialog.submit()
        if new_field is None:
            return None
        self.fields(new_field.section).append(new_field)
        logger.debug("[Session] Added %s field %r to %s", new_field.type.value, new_field.key, new_field.section.value)
        return new_field

    def update_field(self, section: Section, index: int, raw: Any) -> TypedField:
        """Apply raw input (text or toggle state) to a field's display value."""
        typed_field = self.fields(section)[index]
        if typed_field.type == FieldType.INTEGER:
            typed_field.value = coerce_integer(raw)
        elif typed_field.type == FieldType.BOOLEAN:
            typed_field.value = coerce_boolean(raw)
        elif typed_field.type == FieldType.ARRAY:
            typed_field.value = raw if isinstance(raw, str) else join_array(raw)
        else:
            typed_field.value = "" if raw is None else str(raw)
        return typed_field

    def remove_field(self, section: Section, index: int) -> TypedField:
        return self.fields(section).pop(index)

    # -- extra spec rows -----------------------------------------------------

    def add_extra_spec(self, review: str = "", source: str = "") -> ExtraSpec:
        row = ExtraSpec(review=review, source=source)
        self.extra_specs.append(row)
        return row

    def update_extra_spec(self, index: int, review: Optional[str] = None, source: Optional[str] = None) -> ExtraSpec:
        row = self.extra_specs[index]
        if review is not None:
            row.review = review
        if source is not None:
            row.source = source
        return row

    def remove_extra_spec(self, index: int) -> ExtraSpec:
        return self.extra_specs.pop(index)

    # -- save ----------------------------------------------------------------

    def validate(self) -> Optional[str]:
        """First validation problem, or None when the session can be saved."""
        if self.component_type is None:
            return "Please select a component type"
        for key, message in REQUIRED_FIXED:
            value = self.fixed.get(key)
            if value is None or not str(value).strip():
                return message
        return None

    def build_payload(self, now: Optional[str] = None) -> Dict[str, Any]:
        """Recompose the full create/update payload from the current state."""
        static_values = {
            definition.key: coerce_static_value(definition, self.static_values[definition.key])
            for definition in get_static_fields(self.component_type)
            if definition.key in self.static_values
        }
        return recompose(
            fixed=self.fixed,
            component_type=self.component_type,
            core_identity_fields=self.core_identity_fields,
            technical_spec_fields=self.technical_spec_fields,
            static_values=static_values,
            extra_specs=self.extra_specs,
            shape=self.shape,
            now=now,
        )

    async def save(self, client: CatalogClient) -> bool:
        """
        Validate and persist the whole component.

        Returns True on success. Validation problems abort before any
        network call; a failed call keeps the session in edit mode.
        """
        if self.saving:
            logger.warning("[Session] Save already in progress for %s", self.record_id)
            return False

        problem = self.validate()
        if problem:
            self.notify("Validation Error", problem, DESTRUCTIVE)
            return False

        payload = self.build_payload()
        self.saving = True
        try:
            if self.is_creating:
                saved = await client.create_component(payload)
            else:
                saved = await client.update_component(self.record_id, payload)
        except CatalogAPIError as e:
            logger.error("[Session] Save failed for %s: %s", self.record_id or "new component", e)
            self.notify("Error", e.message or "Failed to save.", DESTRUCTIVE)
            return False
        finally:
            self.saving = False

        if self.is_creating:
            self.notify("Created", "New component added successfully.")
        else:
            self.notify("Saved", "Component updated successfully.")
        self.saved_record = saved
        if isinstance(saved, dict) and saved.get("id"):
            self.record_id = saved["id"]
        self.is_creating = False
        self.edit_mode = False
        logger.info("[Session] Saved component %s", self.record_id)
        return True

    async def autofill_from_url(self, client: CatalogClient) -> bool:
        """
        Pre-fill from the product page URL.

        Scraped manufacturer, model and price overwrite the form values;
        scraped spec rows are appended as extra specs unless a row with the
        same review text exists. Nothing is saved.
        """
        url = str(self.fixed.get("product_page_url") or "").strip()
        if not url:
            self.notify("Error", "Product URL required")
            return False

        self.fetching_specs = True
        try:
            scraped = await client.fetch_specs(url)
        except CatalogAPIError as e:
            logger.warning("[Session] Scrape failed for %s: %s", url, e)
            self.notify("Error", "Scraping failed.", DESTRUCTIVE)
            return False
        finally:
            self.fetching_specs = False

        for key in ("manufacturer", "model_name", "model_number"):
            value = getattr(scraped, key)
            if value:
                self.fixed[key] = value
        if scraped.price is not None:
            self.fixed["price"] = scraped.price

        existing = {row.review for row in self.extra_specs}
        for name, value in scraped.specs.items():
            if name not in existing:
                self.extra_specs.append(ExtraSpec(review=name, source=str(value)))
                existing.add(name)

        self.notify("Specs Fetched", "Review fields and save changes.")
        return True


class CatalogBrowser:
    """Component list with filters, paging and per-row actions."""

    def __init__(self, client: CatalogClient, limit: int = 20) -> None:
        self.client = client
        self.category = "All"
        self.search = ""
        self.page = 1
        self.limit = limit
        self.sort_key = "updatedAt"
        self.sort_dir = "desc"
        self.components: List[Dict[str, Any]] = []
        self.meta = PageMeta()
        self.loading = False
        self.notifications: List[Notification] = []

    def notify(self, title: str, description: str, variant: str = DEFAULT) -> Notification:
        notification = Notification(title=title, description=description, variant=variant)
        self.notifications.append(notification)
        return notification

    def set_category(self, category: str) -> None:
        self.category = category or "All"
        self.page = 1

    def set_search(self, search: str) -> None:
        self.search = search
        self.page = 1

    def set_sort(self, key: str, direction: Optional[str] = None) -> None:
        """Sort by ``key``; re-selecting the current key flips the direction."""
        if direction is None:
            direction = ("desc" if self.sort_dir == "asc" else "asc") if key == self.sort_key else "asc"
        self.sort_key = key
        self.sort_dir = direction
        self.page = 1

    async def refresh(self) -> ComponentPage:
        """Reload the current page. A failed fetch shows an empty list."""
        self.loading = True
        try:
            page = await self.client.list_components(
                component_type=self.category,
                search=self.search or None,
                page=self.page,
                limit=self.limit,
                sort_key=self.sort_key,
                sort_dir=self.sort_dir,
            )
        except CatalogAPIError as e:
            logger.error("[Browser] Fetch failed: %s", e)
            page = ComponentPage(meta=PageMeta(currentPage=self.page))
        finally:
            self.loading = False

        self.components = [record.model_dump() for record in page.data]
        self.meta = page.meta
        return page

    async def go_to_page(self, page: int) -> ComponentPage:
        self.page = max(1, page)
        return await self.refresh()

    def new_component(self, component_type: Union[ComponentType, str, None] = None) -> EditSession:
        return EditSession.new(component_type)

    async def open(self, component_id: str) -> Optional[EditSession]:
        """Fetch the full record into a session, or notify and return None."""
        try:
            record = await self.client.get_component(component_id)
        except CatalogAPIError as e:
            logger.error("[Browser] Could not load %s: %s", component_id, e)
            self.notify("Error", "Failed to fetch details.", DESTRUCTIVE)
            return None
        return EditSession.from_record(record)

    async def save(self, session: EditSession) -> bool:
        """Save a session and refresh the list on success."""
        saved = await session.save(self.client)
        if saved:
            await self.refresh()
        return saved

    async def delete(self, component_id: str) -> bool:
        try:
            await self.client.delete_component(component_id)
        except CatalogAPIError as e:
            logger.error("[Browser] Delete failed for %s: %s", component_id, e)
            self.notify("Error", "Failed to delete component", DESTRUCTIVE)
            return False
        self.notify("Success", "Component deleted successfully")
        await self.refresh()
        return True
