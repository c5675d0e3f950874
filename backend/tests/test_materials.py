"""
Tests for the material catalogue.
"""

import pytest

from simulation.materials import (
    MATERIAL_WEAR_RATES,
    get_base_wear_rate,
    get_asset_class,
    get_material,
    list_materials,
)


class TestWearRates:

    def test_known_materials(self):
        assert get_base_wear_rate("asphalt") == 2.5
        assert get_base_wear_rate("concrete") == 1.8
        assert get_base_wear_rate("timber") == 3.5

    def test_lookup_is_case_insensitive(self):
        assert get_base_wear_rate("Asphalt") == get_base_wear_rate("asphalt")

    def test_unknown_material_uses_default(self):
        assert get_base_wear_rate("unobtainium") == 2.0


class TestCatalogue:

    def test_asset_class(self):
        assert get_asset_class("asphalt") == "road"
        assert get_asset_class("steel") == "bridge"
        assert get_asset_class("pvc") == "pipe"
        assert get_asset_class("unobtainium") == "general"

    def test_material_properties(self):
        props = get_material("STEEL")
        assert props.material == "steel"
        assert props.durability_factor == pytest.approx(0.7)
        data = props.to_dict()
        assert data["baseWearRate"] == 1.5
        assert data["assetClass"] == "bridge"
        assert data["description"]

    def test_list_materials_covers_catalogue(self):
        materials = list_materials()
        assert [m.material for m in materials] == list(MATERIAL_WEAR_RATES)
        assert all(m.base_wear_rate > 0 for m in materials)
