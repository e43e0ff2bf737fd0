"""
Component catalog admin: typed dynamic fields, categorization and the
load/save reconciliation around a component REST service.
"""
from catalog_admin.categorize import categorize_key, resolve_section
from catalog_admin.client import CatalogClient
from catalog_admin.editor import AddFieldDialog, CatalogBrowser, EditSession, Notification
from catalog_admin.fields import FieldType, Section, TypedField
from catalog_admin.reconcile import DecomposedRecord, ExtraSpec, StorageShape, decompose, recompose
from catalog_admin.static_fields import ComponentType, StaticFieldDefinition, get_static_fields

__version__ = "1.0.0"

__all__ = [
    "AddFieldDialog",
    "CatalogBrowser",
    "CatalogClient",
    "ComponentType",
    "DecomposedRecord",
    "EditSession",
    "ExtraSpec",
    "FieldType",
    "Notification",
    "Section",
    "StaticFieldDefinition",
    "StorageShape",
    "TypedField",
    "categorize_key",
    "decompose",
    "get_static_fields",
    "recompose",
    "resolve_section",
]
