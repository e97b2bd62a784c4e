"""AllocationCalculator tests — base splits, adjustments, rounding, parsing, and the preliminary estimate."""

import pytest

from costseg_flow.allocation import (
    is_empty_answer,
    load_tables,
    parse_tax_rate,
    parse_whole_amount,
    round_half_up,
)
from costseg_flow.models.allocation import CategoryAllocation, PreliminarySplit
from costseg_flow.models.session import PropertyDetails


# =====================================================================
# Base allocation
# =====================================================================


class TestBaseAllocation:

    def test_commercial_example(self, calculator):
        """500k commercial basis with no takeoff adjustments."""
        report = calculator.calculate({"depreciableBasis": "500000"}, "commercial")
        ca = report.cost_allocation
        assert (ca.personal_property.value, ca.personal_property.percentage) == (125000, 25)
        assert (ca.land_improvements.value, ca.land_improvements.percentage) == (75000, 15)
        assert (ca.real_property.value, ca.real_property.percentage) == (300000, 60)
        assert ca.personal_property.annual_depreciation == 25000
        assert ca.land_improvements.annual_depreciation == 5000
        assert ca.real_property.annual_depreciation == 7692, "round(300000 / 39)"
        assert report.adjustments_applied == []

    def test_recovery_periods(self, calculator):
        commercial = calculator.calculate({"depreciableBasis": "100000"}, "commercial")
        residential = calculator.calculate({"depreciableBasis": "100000"}, "residential")
        assert commercial.cost_allocation.personal_property.depreciation_period == 5
        assert commercial.cost_allocation.land_improvements.depreciation_period == 15
        assert commercial.cost_allocation.real_property.depreciation_period == 39
        assert residential.cost_allocation.real_property.depreciation_period == 27.5

    def test_residential_split(self, calculator):
        report = calculator.calculate({"depreciableBasis": "400000"}, "residential")
        ca = report.cost_allocation
        assert ca.personal_property.value == 60000
        assert ca.land_improvements.value == 40000
        assert ca.real_property.value == 300000
        assert ca.land_improvements.annual_depreciation == 2667
        assert ca.real_property.annual_depreciation == 10909

    def test_buckets_sum_to_basis(self, calculator):
        """Real property takes the remainder, so rounding never loses a dollar."""
        for basis in ("123457", "999999", "1", "333333"):
            for category in ("residential", "commercial", "industrial", "mixed-use"):
                ca = calculator.calculate({"depreciableBasis": basis}, category).cost_allocation
                total = ca.personal_property.value + ca.land_improvements.value + ca.real_property.value
                assert total == int(basis), f"{category} {basis}"

    def test_unknown_category_uses_residential(self, calculator):
        report = calculator.calculate({"depreciableBasis": "100000"}, "houseboat")
        assert report.summary.category == "residential"
        assert report.cost_allocation.personal_property.percentage == 15

    def test_missing_basis_is_zero(self, calculator):
        report = calculator.calculate({}, "commercial")
        assert report.summary.depreciable_basis == 0
        assert report.cost_allocation.real_property.percentage == 0.0


# =====================================================================
# Adjustments
# =====================================================================


class TestAdjustments:

    def test_special_equipment_and_hvac(self, calculator):
        report = calculator.calculate({
            "depreciableBasis": "500000",
            "specialEquipment": "Commercial kitchen equipment",
            "hvacSystemType": "Specialized HVAC (kitchen exhaust, clean rooms, data rooms)",
        }, "commercial")
        ca = report.cost_allocation
        assert ca.personal_property.percentage == 33
        assert ca.personal_property.value == 165000
        assert ca.real_property.value == 260000
        assert ca.real_property.percentage == pytest.approx(52.0)
        assert report.adjustments_applied == ["specialEquipment +5%", "hvacSystemType +3%"]

    def test_all_adjustments_industrial(self, calculator):
        report = calculator.calculate({
            "depreciableBasis": "1000000",
            "specialEquipment": "CNC machines",
            "hvacSystemType": "Industrial process ventilation",
            "electricalSystemType": "High voltage three-phase service",
        }, "industrial")
        ca = report.cost_allocation
        assert ca.personal_property.percentage == 45
        assert ca.land_improvements.percentage == 20
        assert ca.real_property.value == 350000
        assert len(report.adjustments_applied) == 3

    @pytest.mark.parametrize("answer", [
        "None", "n/a", "  ", "no", "None.", "none!", "N/A.",
        "No specialized equipment", "Nothing special",
    ])
    def test_empty_special_equipment_ignored(self, calculator, answer):
        report = calculator.calculate(
            {"depreciableBasis": "500000", "specialEquipment": answer}, "commercial",
        )
        assert report.adjustments_applied == []

    @pytest.mark.parametrize("answer", ["Walk-in freezer", "Notable kiln", "Nordic sauna"])
    def test_equipment_answer_triggers_adjustment(self, calculator, answer):
        """Words that merely start with "no" still count as equipment."""
        report = calculator.calculate(
            {"depreciableBasis": "500000", "specialEquipment": answer}, "commercial",
        )
        assert report.adjustments_applied == ["specialEquipment +5%"]
        assert report.cost_allocation.personal_property.value == 150000

    def test_substring_match_is_case_insensitive(self, calculator):
        report = calculator.calculate(
            {"depreciableBasis": "500000", "electricalSystemType": "EMERGENCY power"},
            "commercial",
        )
        assert report.adjustments_applied == ["electricalSystemType +2%"]


# =====================================================================
# Summary and report sections
# =====================================================================


class TestSummary:

    def test_benefit_and_savings(self, calculator):
        report = calculator.calculate({
            "depreciableBasis": "500000",
            "purchasePrice": "800000",
            "taxBracket": "24% (Individual: $89K-$191K, Married: $178K-$340K)",
        }, "commercial")
        s = report.summary
        assert s.purchase_price == 800000
        assert s.land_value == 300000
        assert s.total_annual_depreciation == 25000 + 5000 + 7692
        assert s.first_year_benefit == 25000 + 2500
        assert s.tax_rate == 24
        assert s.estimated_tax_savings == 6600

    def test_default_tax_rate(self, calculator):
        report = calculator.calculate({"depreciableBasis": "500000"}, "commercial")
        assert report.summary.tax_rate == 24

    def test_sections_copy_answers(self, calculator):
        report = calculator.calculate({
            "depreciableBasis": "500000",
            "placedInServiceDate": "01/15/2020",
            "acquisitionMethod": "Cash purchase",
            "improvementCosts": "$25,000",
            "foundationMaterial": "Spread footings",
            "specialtySystemsDetails": "Fire suppression",
        }, "commercial")
        assert report.tax_information.placed_in_service == "01/15/2020"
        assert report.tax_information.improvement_costs == 25000
        assert report.takeoffs.foundation == "Spread footings"
        assert report.takeoffs.special_systems == "Fire suppression"
        assert report.takeoffs.walls is None


# =====================================================================
# Helpers and tables
# =====================================================================


class TestHelpers:

    @pytest.mark.parametrize("value,expected", [(2.5, 3), (0.5, 1), (7692.3, 7692), (2666.67, 2667)])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    @pytest.mark.parametrize("raw,expected", [
        ("500000", 500000),
        ("$1,250,000", 1250000),
        ("500,000 USD", 500000),
        ("25000.75", 25000),
        ("lots", 0),
        (None, 0),
    ])
    def test_parse_whole_amount(self, raw, expected):
        assert parse_whole_amount(raw) == expected

    def test_parse_tax_rate(self):
        assert parse_tax_rate("37% (Individual: $418K+, Married: $647K+)") == pytest.approx(0.37)
        assert parse_tax_rate("not sure") == pytest.approx(0.24)
        assert parse_tax_rate(None) == pytest.approx(0.24)

    def test_packaged_tables(self, calculator):
        tables = calculator.tables
        assert set(tables.categories) == {"residential", "commercial", "industrial", "mixed-use"}
        assert {a.field for a in tables.adjustments} == {
            "specialEquipment", "hvacSystemType", "electricalSystemType",
        }

    def test_percentages_must_sum_to_100(self):
        with pytest.raises(ValueError, match="sum to 100"):
            CategoryAllocation(personal_property=30, land_improvements=30, real_property=30)

    def test_tables_require_default_category(self, tmp_path):
        path = tmp_path / "tables.yaml"
        path.write_text(
            "categories:\n"
            "  commercial: {personal_property: 25, land_improvements: 15, real_property: 60}\n",
            encoding="utf-8",
        )
        with pytest.raises(ValueError, match="residential"):
            load_tables(path)

    def test_preliminary_rules_require_default_category(self, tmp_path):
        path = tmp_path / "tables.yaml"
        path.write_text(
            "categories:\n"
            "  residential: {personal_property: 15, land_improvements: 10, real_property: 75}\n"
            "preliminary:\n"
            "  categories:\n"
            "    commercial: {personal_property: 25, land_improvements: 15}\n",
            encoding="utf-8",
        )
        with pytest.raises(ValueError, match="Preliminary rules"):
            load_tables(path)

    def test_preliminary_section_optional(self, tmp_path):
        path = tmp_path / "tables.yaml"
        path.write_text(
            "categories:\n"
            "  residential: {personal_property: 15, land_improvements: 10, real_property: 75}\n",
            encoding="utf-8",
        )
        rules = load_tables(path).preliminary
        assert rules.land_share == 20
        assert rules.age_factor == pytest.approx(0.8)
        assert set(rules.categories) == {"residential"}

    def test_preliminary_rules_cannot_exceed_100(self):
        with pytest.raises(ValueError, match="exceed 100"):
            PreliminarySplit(personal_property=70, land_improvements=40)

    @pytest.mark.parametrize("raw,expected", [
        (None, True),
        ("None.", True),
        ("no crane, no kiln", True),
        ("2 paint booths", False),
        ("Nominal compressor", False),
    ])
    def test_is_empty_answer(self, raw, expected):
        assert is_empty_answer(raw) is expected


# =====================================================================
# Preliminary analysis (property details only)
# =====================================================================


def _details(property_type="commercial", year_built="1998", **overrides):
    fields = dict(
        address="1 Main St",
        city="Austin",
        state="TX",
        zip_code="78701",
        purchase_price="800000",
        purchase_date="01/15/2020",
        property_type=property_type,
        square_footage="12000",
        year_built=year_built,
    )
    fields.update(overrides)
    return PropertyDetails(**fields)


class TestPreliminary:

    def test_older_commercial_building(self, calculator):
        """27 years old: personal property 25% scaled by 0.8 to 20%."""
        result = calculator.preliminary(_details(), as_of_year=2025)
        assert result.category == "commercial"
        assert result.purchase_price == 800000
        assert result.land_value == 160000, "land defaults to 20% of price"
        assert result.building_value == 640000
        assert result.property_age == 27
        assert result.age_adjusted

        ca = result.cost_allocation
        assert ca.personal_property.percentage == pytest.approx(20)
        assert ca.personal_property.value == 128000
        assert ca.land_improvements.value == 96000
        assert ca.real_property.value == 416000
        assert ca.personal_property.annual_depreciation == 25600
        assert ca.land_improvements.annual_depreciation == 6400
        assert ca.real_property.annual_depreciation == 10667
        assert result.total_annual_depreciation == 42667
        assert result.first_year_benefit == 32000
        assert result.tax_rate == 35
        assert result.estimated_tax_savings == 11200

    def test_newer_building_not_adjusted(self, calculator):
        result = calculator.preliminary(_details(year_built="2015"), as_of_year=2025)
        assert result.property_age == 10
        assert not result.age_adjusted
        assert result.cost_allocation.personal_property.percentage == 25
        assert result.cost_allocation.personal_property.value == 160000

    def test_age_threshold_is_exclusive(self, calculator):
        result = calculator.preliminary(_details(year_built="2005"), as_of_year=2025)
        assert result.property_age == 20
        assert not result.age_adjusted

    def test_unreadable_year_built(self, calculator):
        result = calculator.preliminary(_details(year_built="unknown"), as_of_year=2025)
        assert result.property_age is None
        assert not result.age_adjusted

    def test_explicit_land_value(self, calculator):
        result = calculator.preliminary(
            _details(year_built="2015", land_value="$200,000"), as_of_year=2025,
        )
        assert result.land_value == 200000
        assert result.building_value == 600000
        assert result.cost_allocation.personal_property.value == 150000

    def test_zero_land_value_uses_default(self, calculator):
        result = calculator.preliminary(_details(land_value="0"), as_of_year=2025)
        assert result.land_value == 160000

    def test_explicit_building_value(self, calculator):
        result = calculator.preliminary(
            _details(year_built="2015", building_value="500000"), as_of_year=2025,
        )
        assert result.land_value == 160000
        assert result.building_value == 500000

    def test_residential_uses_27_5_years(self, calculator):
        result = calculator.preliminary(
            _details("residential", "2010", purchase_price="400000"), as_of_year=2025,
        )
        ca = result.cost_allocation
        assert result.building_value == 320000
        assert ca.personal_property.value == 48000
        assert ca.land_improvements.value == 32000
        assert ca.real_property.depreciation_period == 27.5
        assert ca.real_property.annual_depreciation == 8727

    def test_industrial_split(self, calculator):
        result = calculator.preliminary(_details("industrial", "2015"), as_of_year=2025)
        ca = result.cost_allocation
        assert ca.personal_property.value == 224000
        assert ca.land_improvements.value == 128000
        assert ca.real_property.depreciation_period == 39

    def test_mixed_use_uses_residential_split(self, calculator):
        result = calculator.preliminary(_details("Mixed Use", "2015"), as_of_year=2025)
        assert result.category == "mixed-use"
        assert result.cost_allocation.personal_property.percentage == 15
        assert result.cost_allocation.real_property.depreciation_period == 39

    def test_unknown_type_falls_back_to_residential(self, calculator):
        result = calculator.preliminary(_details("parking garage", "2015"), as_of_year=2025)
        assert result.category == "residential"
        assert result.cost_allocation.real_property.depreciation_period == 27.5

    def test_buckets_sum_to_building_value(self, calculator):
        result = calculator.preliminary(
            _details(purchase_price="987,654", year_built="1970"), as_of_year=2025,
        )
        ca = result.cost_allocation
        total = ca.personal_property.value + ca.land_improvements.value + ca.real_property.value
        assert total == result.building_value

    def test_defaults_to_current_year(self, calculator):
        result = calculator.preliminary(_details(year_built="1900"))
        assert result.property_age > 100
        assert result.age_adjusted
