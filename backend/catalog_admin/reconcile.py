"""
Reconciliation between stored component records and editable field lists.

Load: ``decompose`` splits a record's dynamic payload into core-identity and
technical field lists. Two stored shapes are supported:

1. Pre-separated: the type sub-record carries ``core_custom_data`` and
   ``data`` (or ``tech_specs``) maps.
2. Legacy flattened: dynamic fields live in ``specs`` as
   ``_dynamic_<key>`` wrappers ``{v, source_id, confidence, updated_at,
   section}``, next to unclassified custom keys.

Save: ``recompose`` rebuilds the full payload from the fixed fields, both
field lists, the static values and the extra-spec rows. Legacy wrappers get
fresh provenance metadata on every save.
"""
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union

from catalog_admin.categorize import resolve_section
from catalog_admin.fields import Section, TypedField, field_from_stored
from catalog_admin.logging_config import get_logger
from catalog_admin.static_fields import (
    ComponentType,
    get_static_fields,
    parse_component_type,
    parse_number,
    static_keys,
)

logger = get_logger(__name__)

DYNAMIC_PREFIX = "_dynamic_"
EXTRA_SPECS_KEY = "extra_specs"
CORE_DATA_KEY = "core_custom_data"
TECH_DATA_KEYS = ("data", "tech_specs")
SEPARATED_KEYS = (CORE_DATA_KEY,) + TECH_DATA_KEYS

# Never shown as dynamic fields (compared lowercased)
SYSTEM_KEYS = frozenset(
    {
        "id",
        "component_id",
        "componentid",
        "created_at",
        "updated_at",
        "createdat",
        "updatedat",
    }
)

FIXED_TEXT_FIELDS = (
    "manufacturer",
    "vendor",
    "model_name",
    "model_number",
    "product_page_url",
    "image_url",
)
PRICE_FIELDS = ("price", "discounted_price", "tracked_price")

MANUAL_SOURCE = "manual"
MANUAL_CONFIDENCE = 1.0


class StorageShape(str, Enum):
    """Where dynamic fields are written on save."""

    SEPARATED = "separated"
    LEGACY = "legacy"


@dataclass
class ExtraSpec:
    """A free-text review/source row kept in ``specs.extra_specs``."""

    review: str = ""
    source: str = ""

    def is_empty(self) -> bool:
        return not (self.review or "").strip() and not (self.source or "").strip()


@dataclass
class DecomposedRecord:
    """Editable view of a stored record's dynamic and static data."""

    component_type: Optional[ComponentType]
    core_identity_fields: List[TypedField] = field(default_factory=list)
    technical_spec_fields: List[TypedField] = field(default_factory=list)
    static_values: Dict[str, Any] = field(default_factory=dict)
    extra_specs: List[ExtraSpec] = field(default_factory=list)
    shape: StorageShape = StorageShape.SEPARATED

    def fields_in(self, section: Section) -> List[TypedField]:
        if section == Section.TECHNICAL_SPECS:
            return self.technical_spec_fields
        return self.core_identity_fields


# ---------------------------------------------------------------------------
# Load
# ---------------------------------------------------------------------------

def get_sub_record(record: Mapping[str, Any], component_type: Optional[ComponentType]) -> Dict[str, Any]:
    """The type-specific sub-record, keyed by the lowercased type."""
    if component_type is None:
        return {}
    sub_record = record.get(component_type.record_key)
    return sub_record if isinstance(sub_record, dict) else {}


def _specs_of(record: Mapping[str, Any]) -> Dict[str, Any]:
    specs = record.get("specs")
    return specs if isinstance(specs, dict) else {}


def _is_system_key(key: str) -> bool:
    return key.lower() in SYSTEM_KEYS


def _unwrap(entry: Any) -> Tuple[Any, Any]:
    """Split a stored entry into (value, explicit section tag)."""
    if isinstance(entry, dict) and "v" in entry:
        return entry["v"], entry.get("section")
    return entry, None


def _load_field(key: str, value: Any, section: Section) -> TypedField:
    """field_from_stored, warning when a nested object is flattened to text."""
    if value is not None and not isinstance(value, (str, int, float, bool, list, tuple)):
        logger.warning(
            "[Reconcile] Stored value of %r is a %s, loaded as text; saving will overwrite it",
            key,
            type(value).__name__,
        )
    return field_from_stored(key, value, section)


def detect_shape(record: Mapping[str, Any]) -> StorageShape:
    """Pick the storage shape from the keys present on a loaded record."""
    component_type = parse_component_type(record.get("type"))
    sub_record = get_sub_record(record, component_type)
    if any(key in sub_record for key in SEPARATED_KEYS):
        return StorageShape.SEPARATED
    if any(key.startswith(DYNAMIC_PREFIX) for key in _specs_of(record)):
        return StorageShape.LEGACY
    return StorageShape.SEPARATED


def decompose_separated(
    sub_record: Mapping[str, Any], component_type: Optional[ComponentType]
) -> Tuple[List[TypedField], List[TypedField]]:
    """
    Adapter for the pre-separated shape.

    ``core_custom_data`` entries are core identity, ``data``/``tech_specs``
    entries are technical. Static catalog keys are skipped in both.
    """
    reserved = static_keys(component_type)
    core: List[TypedField] = []
    technical: List[TypedField] = []

    core_data = sub_record.get(CORE_DATA_KEY)
    if isinstance(core_data, dict):
        for key, value in core_data.items():
            if key in reserved:
                continue
            core.append(_load_field(key, value, Section.CORE_IDENTITY))

    for map_key in TECH_DATA_KEYS:
        tech_data = sub_record.get(map_key)
        if not isinstance(tech_data, dict):
            continue
        for key, value in tech_data.items():
            if key in reserved:
                continue
            technical.append(_load_field(key, value, Section.TECHNICAL_SPECS))

    return core, technical


def decompose_legacy(
    specs: Mapping[str, Any],
    sub_record: Mapping[str, Any],
    component_type: Optional[ComponentType],
) -> List[TypedField]:
    """
    Adapter for the legacy flattened shape.

    Returns fields with a resolved section: the wrapper's tag when valid,
    otherwise the keyword heuristic. Stray custom keys in ``specs`` and at
    the top of the sub-record are run through the heuristic too.
    """
    reserved = static_keys(component_type)
    fields: List[TypedField] = []

    for key, value in sub_record.items():
        if key in SEPARATED_KEYS or key in reserved or _is_system_key(key):
            continue
        fields.append(_load_field(key, value, resolve_section(key)))

    for raw_key, entry in specs.items():
        if raw_key == EXTRA_SPECS_KEY:
            continue
        if raw_key.startswith(DYNAMIC_PREFIX):
            key = raw_key[len(DYNAMIC_PREFIX):]
        else:
            key = raw_key
            if _is_system_key(key):
                continue
        if not key or key in reserved:
            continue
        value, explicit = _unwrap(entry)
        fields.append(_load_field(key, value, resolve_section(key, explicit)))

    return fields


def load_extra_specs(specs: Mapping[str, Any]) -> List[ExtraSpec]:
    """Read ``specs.extra_specs`` rows, dropping empty ones."""
    rows = specs.get(EXTRA_SPECS_KEY)
    if not isinstance(rows, list):
        return []
    return filter_extra_specs(rows)


def load_static_values(
    sub_record: Mapping[str, Any], component_type: Optional[ComponentType]
) -> Dict[str, Any]:
    """Static catalog values from the sub-record (top level first, then the tech map)."""
    values: Dict[str, Any] = {}
    keys = static_keys(component_type)
    for key, value in sub_record.items():
        if key in keys:
            values[key] = "" if value is None else value
    for map_key in TECH_DATA_KEYS:
        tech_data = sub_record.get(map_key)
        if not isinstance(tech_data, dict):
            continue
        for key, value in tech_data.items():
            if key in keys and key not in values:
                values[key] = "" if value is None else value
    return values


def decompose(record: Mapping[str, Any]) -> DecomposedRecord:
    """Split a stored component record into editable, categorized lists."""
    component_type = parse_component_type(record.get("type"))
    sub_record = get_sub_record(record, component_type)
    specs = _specs_of(record)

    result = DecomposedRecord(
        component_type=component_type,
        static_values=load_static_values(sub_record, component_type),
        extra_specs=load_extra_specs(specs),
        shape=detect_shape(record),
    )

    seen: Set[str] = set()

    def _place(typed_field: TypedField) -> None:
        if typed_field.key in seen:
            logger.debug("[Reconcile] Duplicate dynamic key %r ignored", typed_field.key)
            return
        seen.add(typed_field.key)
        result.fields_in(typed_field.section).append(typed_field)

    core, technical = decompose_separated(sub_record, component_type)
    for typed_field in core + technical:
        _place(typed_field)
    for typed_field in decompose_legacy(specs, sub_record, component_type):
        _place(typed_field)

    logger.debug(
        "[Reconcile] Decomposed %s record: %d core, %d technical, %d static",
        component_type.value if component_type else "untyped",
        len(result.core_identity_fields),
        len(result.technical_spec_fields),
        len(result.static_values),
    )
    return result


# ---------------------------------------------------------------------------
# Save
# ---------------------------------------------------------------------------

ExtraSpecRow = Union[ExtraSpec, Mapping[str, Any]]


def _as_extra_spec(row: ExtraSpecRow) -> ExtraSpec:
    if isinstance(row, ExtraSpec):
        return row
    review = row.get("review")
    source = row.get("source")
    return ExtraSpec(
        review="" if review is None else str(review),
        source="" if source is None else str(source),
    )


def filter_extra_specs(rows: Iterable[ExtraSpecRow]) -> List[ExtraSpec]:
    """Keep rows with a non-empty review or source."""
    kept: List[ExtraSpec] = []
    for row in rows:
        if not isinstance(row, (ExtraSpec, Mapping)):
            continue
        spec = _as_extra_spec(row)
        if not spec.is_empty():
            kept.append(spec)
    return kept


def coerce_price(value: Any) -> Optional[float]:
    """Price as float or None; blank or unparsable input gives None."""
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return parse_number(value)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def dynamic_wrapper(value: Any, section: Section, updated_at: str) -> Dict[str, Any]:
    """Legacy storage wrapper with manual provenance."""
    return {
        "v": value,
        "source_id": MANUAL_SOURCE,
        "confidence": MANUAL_CONFIDENCE,
        "updated_at": updated_at,
        "section": section.value,
    }


def recompose(
    fixed: Mapping[str, Any],
    component_type: Union[ComponentType, str],
    core_identity_fields: Iterable[TypedField],
    technical_spec_fields: Iterable[TypedField],
    static_values: Optional[Mapping[str, Any]] = None,
    extra_specs: Iterable[ExtraSpecRow] = (),
    shape: StorageShape = StorageShape.SEPARATED,
    now: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build the create/update payload the catalog service expects.

    Steps:
    1. Coerce every dynamic field into its section map.
    2. Copy static values for the active type's catalog only.
    3. Drop empty extra-spec rows.
    4. Merge fixed attributes; prices become float or None.
    5. For the legacy shape, wrap dynamic fields under ``specs`` with
       fresh manual provenance.
    """
    resolved_type = parse_component_type(component_type)
    if resolved_type is None:
        raise ValueError(f"Unknown component type: {component_type!r}")

    reserved = static_keys(resolved_type)
    sectioned: List[Tuple[TypedField, Section]] = []
    for section, typed_fields in (
        (Section.CORE_IDENTITY, core_identity_fields),
        (Section.TECHNICAL_SPECS, technical_spec_fields),
    ):
        for typed_field in typed_fields:
            if typed_field.key in reserved:
                logger.warning(
                    "[Reconcile] Dynamic field %r shadows a static %s field, skipped",
                    typed_field.key,
                    resolved_type.value,
                )
                continue
            sectioned.append((typed_field, section))

    core_data: Dict[str, Any] = {}
    tech_data: Dict[str, Any] = {}
    for typed_field, section in sectioned:
        target = tech_data if section == Section.TECHNICAL_SPECS else core_data
        target[typed_field.key] = typed_field.storage_value()

    compat_specs: Dict[str, Any] = {}
    static_values = static_values or {}
    for definition in get_static_fields(resolved_type):
        if definition.key in static_values:
            compat_specs[definition.key] = static_values[definition.key]

    specs: Dict[str, Any] = {
        EXTRA_SPECS_KEY: [asdict(row) for row in filter_extra_specs(extra_specs)],
    }

    payload: Dict[str, Any] = {"type": resolved_type.value}
    for key in FIXED_TEXT_FIELDS:
        value = fixed.get(key)
        payload[key] = "" if value is None else str(value)
    payload["vendor"] = payload["vendor"] or None
    for key in PRICE_FIELDS:
        payload[key] = coerce_price(fixed.get(key))

    if shape == StorageShape.LEGACY:
        updated_at = now or _now_iso()
        for typed_field, section in sectioned:
            specs[DYNAMIC_PREFIX + typed_field.key] = dynamic_wrapper(
                typed_field.storage_value(), section, updated_at
            )
        payload["specs"] = specs
        payload["compat_specs"] = compat_specs
        return payload

    payload["specs"] = specs
    payload[CORE_DATA_KEY] = core_data
    payload["tech_specs"] = {**tech_data, **compat_specs}
    payload["compat_specs"] = compat_specs
    return payload
