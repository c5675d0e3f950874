"""
Material Catalogue
==================
Annual base wear rates and reference properties for infrastructure materials.
"""

from dataclasses import dataclass
from typing import Dict, List

from core.constants import DEFAULT_ANNUAL_WEAR_RATE


# Material base wear rates (annual degradation in condition points)
MATERIAL_WEAR_RATES: Dict[str, float] = {
    # Road materials
    "asphalt": 2.5,
    "concrete": 1.8,
    "gravel": 4.0,
    "brick": 2.0,
    # Bridge materials
    "steel": 1.5,
    "reinforced_concrete": 1.6,
    "prestressed_concrete": 1.4,
    "timber": 3.5,
    # Pipe materials
    "pvc": 1.2,
    "ductile_iron": 1.8,
    "cast_iron": 2.2,
    "hdpe": 1.0,
    "concrete_pipe": 2.0,
    "clay": 2.5,
    # Drainage materials
    "corrugated_metal": 2.8,
    "plastic": 1.5,
    # General
    "composite": 1.3,
    "other": 2.0,
}

ASSET_CLASS_MATERIALS: Dict[str, tuple] = {
    "road": ("asphalt", "concrete", "gravel", "brick"),
    "bridge": ("steel", "reinforced_concrete", "prestressed_concrete", "timber"),
    "pipe": ("pvc", "ductile_iron", "cast_iron", "hdpe", "concrete_pipe", "clay"),
    "drainage": ("corrugated_metal", "plastic"),
}

# Relative replacement cost versus asphalt
COST_FACTORS: Dict[str, float] = {
    "steel": 2.5,
    "prestressed_concrete": 2.0,
    "reinforced_concrete": 1.8,
    "ductile_iron": 1.5,
    "concrete": 1.4,
    "asphalt": 1.0,
    "pvc": 0.6,
    "hdpe": 0.5,
    "timber": 0.8,
    "brick": 1.2,
}

DESCRIPTIONS: Dict[str, str] = {
    "asphalt": "Common road surface material",
    "concrete": "Durable material for roads and structures",
    "steel": "High-strength material for structures",
    "pvc": "Lightweight pipe material",
    "hdpe": "High-density polyethylene pipe",
    "ductile_iron": "Strong pipe material",
}


@dataclass(frozen=True)
class MaterialProperties:
    """Reference properties for a single material."""
    material: str
    base_wear_rate: float
    asset_class: str
    cost_factor: float
    description: str

    @property
    def durability_factor(self) -> float:
        return 1 - self.base_wear_rate / 5

    def to_dict(self) -> Dict[str, object]:
        return {
            "material": self.material,
            "baseWearRate": self.base_wear_rate,
            "assetClass": self.asset_class,
            "durabilityFactor": round(self.durability_factor, 3),
            "costFactor": self.cost_factor,
            "description": self.description,
        }


def get_base_wear_rate(material: str) -> float:
    """Annual wear rate for a material; unknown materials use the default rate."""
    return MATERIAL_WEAR_RATES.get(material.lower(), DEFAULT_ANNUAL_WEAR_RATE)


def get_asset_class(material: str) -> str:
    material = material.lower()
    for asset_class, materials in ASSET_CLASS_MATERIALS.items():
        if material in materials:
            return asset_class
    return "general"


def get_material(material: str) -> MaterialProperties:
    key = material.lower()
    return MaterialProperties(
        material=key,
        base_wear_rate=get_base_wear_rate(key),
        asset_class=get_asset_class(key),
        cost_factor=COST_FACTORS.get(key, 1.0),
        description=DESCRIPTIONS.get(key, "Infrastructure material"),
    )


def list_materials() -> List[MaterialProperties]:
    """All catalogued materials, in catalogue order."""
    return [get_material(name) for name in MATERIAL_WEAR_RATES]
