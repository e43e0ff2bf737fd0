"""
Static technical field catalog per component type.

These fields are fixed for each type and are stored apart from the
user-defined dynamic fields. Any stored key that is not listed here is
treated as dynamic.
"""
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union


class ComponentType(str, Enum):
    """Kind of hardware component. Immutable once a record exists."""

    PROCESSOR = "PROCESSOR"
    GRAPHICS_CARD = "GRAPHICS_CARD"
    MOTHERBOARD = "MOTHERBOARD"
    RAM = "RAM"
    POWER_SUPPLY = "POWER_SUPPLY"
    SSD = "SSD"
    HDD = "HDD"
    CPU_COOLER = "CPU_COOLER"
    CABINET = "CABINET"
    MONITOR = "MONITOR"
    KEYBOARD = "KEYBOARD"
    MOUSE = "MOUSE"
    HEADSET = "HEADSET"
    ADDITIONAL_CASE_FANS = "ADDITIONAL_CASE_FANS"

    @property
    def record_key(self) -> str:
        """Key of the type-specific sub-record on a component record."""
        return self.value.lower()


@dataclass(frozen=True)
class StaticFieldDefinition:
    """An expected technical attribute of a component type."""

    key: str
    label: str
    type: str = "text"  # "text" | "number"
    unit: Optional[str] = None
    placeholder: Optional[str] = None
    choices: Tuple[str, ...] = ()


def _text(key: str, label: str, placeholder: Optional[str] = None, choices: Tuple[str, ...] = ()) -> StaticFieldDefinition:
    return StaticFieldDefinition(key=key, label=label, type="text", placeholder=placeholder, choices=choices)


def _number(key: str, label: str, unit: Optional[str] = None) -> StaticFieldDefinition:
    return StaticFieldDefinition(key=key, label=label, type="number", unit=unit)


_YES_NO = ("true", "false")

STATIC_FIELDS: Dict[ComponentType, List[StaticFieldDefinition]] = {
    ComponentType.PROCESSOR: [
        _text("socket", "Socket", "AM5, LGA1700"),
        _number("cores", "Cores"),
        _number("threads", "Threads"),
        _number("base_clock", "Base Clock", "GHz"),
        _number("boost_clock", "Boost Clock", "GHz"),
        _number("tdp_watts", "TDP", "W"),
        _text("integrated_gpu", "iGPU", choices=_YES_NO),
        _text("includes_cooler", "Cooler Included", choices=_YES_NO),
    ],
    ComponentType.GRAPHICS_CARD: [
        _text("chipset", "Chipset", "RTX 4060"),
        _number("vram_gb", "VRAM", "GB"),
        _number("length_mm", "Length", "mm"),
        _number("tdp_watts", "TDP", "W"),
        _number("recommended_psu", "Rec. PSU", "W"),
    ],
    ComponentType.MOTHERBOARD: [
        _text("socket", "Socket"),
        _text("form_factor", "Form Factor", "ATX, mATX", ("ATX", "mATX", "Mini-ITX", "E-ATX")),
        _text("memory_type", "RAM Type", "DDR4, DDR5", ("DDR4", "DDR5")),
        _number("memory_slots", "RAM Slots"),
        _number("max_memory_gb", "Max RAM", "GB"),
        _number("m2_slots", "M.2 Slots"),
        _text("wifi", "WiFi", choices=_YES_NO),
    ],
    ComponentType.RAM: [
        _text("memory_type", "Type", "DDR4, DDR5", ("DDR4", "DDR5")),
        _number("capacity_gb", "Total Capacity", "GB"),
        _number("modules", "Modules (Sticks)"),
        _number("speed_mhz", "Speed", "MHz"),
        _number("cas_latency", "CL"),
    ],
    ComponentType.POWER_SUPPLY: [
        _number("wattage", "Wattage", "W"),
        _text("efficiency", "Efficiency", "80+ Gold"),
        _text("modular", "Modular", "Full, Semi", ("Full", "Semi", "Non")),
    ],
    ComponentType.SSD: [
        _number("capacity_gb", "Capacity", "GB"),
        _text("interface", "Interface", "SATA, NVMe", ("SATA", "NVMe")),
        _text("form_factor", "Form Factor", '2.5", M.2'),
        _text("gen", "Gen", "Gen4"),
    ],
    ComponentType.HDD: [
        _number("capacity_gb", "Capacity", "GB"),
        _number("rpm", "RPM"),
        _number("cache_mb", "Cache", "MB"),
        _text("form_factor", "Form Factor", '3.5", 2.5"'),
    ],
    ComponentType.CPU_COOLER: [
        _text("type", "Type", "Air, AIO", ("Air", "AIO")),
        _number("height_mm", "Height", "mm"),
        _number("radiator_size", "Radiator", "mm"),
    ],
    ComponentType.CABINET: [
        _number("max_gpu_len_mm", "Max GPU Length", "mm"),
        _number("max_cpu_height", "Max CPU Cooler", "mm"),
    ],
    ComponentType.MONITOR: [
        _number("size_inches", "Size", "in"),
        _text("resolution", "Resolution", "1920x1080"),
        _number("refresh_rate", "Refresh Rate", "Hz"),
        _text("panel_type", "Panel Type", "IPS, VA", ("IPS", "VA", "TN", "OLED")),
        _number("response_time", "Response Time", "ms"),
    ],
    ComponentType.KEYBOARD: [
        _text("switch_type", "Switch Type", "Mechanical, Membrane"),
        _text("layout", "Layout", "QWERTY, TKL"),
        _text("backlit", "Backlit", choices=_YES_NO),
        _text("wireless", "Wireless", choices=_YES_NO),
    ],
    ComponentType.MOUSE: [
        _number("dpi", "DPI"),
        _text("sensor_type", "Sensor Type", "Optical, Laser"),
        _text("wireless", "Wireless", choices=_YES_NO),
        _number("buttons", "Buttons"),
    ],
    ComponentType.HEADSET: [
        _number("driver_size", "Driver Size", "mm"),
        _number("impedance", "Impedance", "ohms"),
        _text("frequency_response", "Frequency Response"),
        _text("wireless", "Wireless", choices=_YES_NO),
        _text("noise_cancellation", "Noise Cancellation", choices=_YES_NO),
    ],
    ComponentType.ADDITIONAL_CASE_FANS: [
        _number("size_mm", "Size", "mm"),
        _number("speed_rpm", "Speed", "RPM"),
        _number("noise_level", "Noise Level", "dBA"),
        _number("airflow_cfm", "Airflow", "CFM"),
    ],
}

_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+))", re.ASCII)


def parse_component_type(value: Union[str, ComponentType, None]) -> Optional[ComponentType]:
    """Resolve a type name in any case; unknown names give None."""
    if value is None:
        return None
    if isinstance(value, ComponentType):
        return value
    try:
        return ComponentType(str(value).strip().upper())
    except ValueError:
        return None


def get_static_fields(component_type: Union[str, ComponentType, None]) -> List[StaticFieldDefinition]:
    """Static field definitions for a type (empty for unknown types)."""
    resolved = parse_component_type(component_type)
    if resolved is None:
        return []
    return STATIC_FIELDS.get(resolved, [])


def static_keys(component_type: Union[str, ComponentType, None]) -> FrozenSet[str]:
    """Keys of the static catalog of a type."""
    return frozenset(field.key for field in get_static_fields(component_type))


def parse_number(value: Any) -> Optional[float]:
    """
    Leading-number parse (parseFloat-like).

    Returns None when nothing parses or the result is not finite, so the
    value is always valid JSON.
    """
    if isinstance(value, bool) or value is None:
        return None
    try:
        if isinstance(value, (int, float)):
            number = float(value)
        else:
            match = _LEADING_NUMBER.match(str(value))
            if not match:
                return None
            number = float(match.group(1))
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def coerce_static_value(definition: StaticFieldDefinition, value: Any) -> Any:
    """Coerce a form value for a static field; number fields never store strings."""
    if definition.type != "number":
        return "" if value is None else value
    number = parse_number(value)
    if number is None:
        return None
    return int(number) if number.is_integer() else number
