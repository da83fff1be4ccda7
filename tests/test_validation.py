"""
Settlement payload validation tests
"""

import pytest

from reglements_api.validation import (
    clean_update_fields,
    is_number,
    is_valid_date,
    parse_id,
    reglement_values,
    to_columns,
    validate_reglement,
)


class TestScalars:
    """Test number, id and date checks"""

    @pytest.mark.parametrize("value", [1, 0, -2.5, "450.50", " 12 "])
    def test_numbers(self, value):
        assert is_number(value)

    @pytest.mark.parametrize("value", [None, True, "", "abc", float("nan"), [], {}])
    def test_not_numbers(self, value):
        assert not is_number(value)

    @pytest.mark.parametrize(
        "value, expected",
        [(12, 12), ("12", 12), ("12abc", 12), (12.9, 12), ("abc", None), (None, None), (True, None)],
    )
    def test_parse_id(self, value, expected):
        assert parse_id(value) == expected

    @pytest.mark.parametrize(
        "value",
        ["2024-03-01", "2024-03-01T10:15:30Z", "2024-03-01T10:15:30.123Z", "2024-03-01T10:15:30+02:00"],
    )
    def test_valid_dates(self, value):
        assert is_valid_date(value)

    @pytest.mark.parametrize("value", ["", "01/03/2024", "2024-13-01", 20240301, None])
    def test_invalid_dates(self, value):
        assert not is_valid_date(value)


class TestValidateReglement:
    """Test full payload validation"""

    def test_valid_payload(self, sample_reglement_data):
        assert validate_reglement(sample_reglement_data) == []

    def test_empty_payload_reports_everything(self):
        errors = validate_reglement({})
        assert errors[0] == "MONTANT is required and must be a valid number"
        assert "USERC (Agent) is required and cannot be empty" in errors
        assert "TARIFAIRE (Rate) is required and cannot be empty" in errors
        assert "DATE_REGLEMENT is required" in errors
        assert errors[-1] == "id_salle is required and must be a valid number"
        assert len(errors) == 15

    @pytest.mark.parametrize("value", [0, 0.0, ""])
    def test_zero_amount_rejected(self, sample_reglement_data, value):
        sample_reglement_data["MONTANT"] = value
        assert validate_reglement(sample_reglement_data) == ["MONTANT is required and must be a valid number"]

    def test_zero_salle_rejected(self, sample_reglement_data):
        sample_reglement_data["id_salle"] = 0
        assert validate_reglement(sample_reglement_data) == ["id_salle is required and must be a valid number"]

    def test_zero_as_string_accepted(self, sample_reglement_data):
        sample_reglement_data["MONTANT"] = "0"
        assert validate_reglement(sample_reglement_data) == []

    def test_blank_text_rejected(self, sample_reglement_data):
        sample_reglement_data["LIBELLE"] = "   "
        assert validate_reglement(sample_reglement_data) == ["LIBELLE (Label) is required and cannot be empty"]

    def test_bad_date_rejected(self, sample_reglement_data):
        sample_reglement_data["DATE_DEBUT"] = "tomorrow"
        assert validate_reglement(sample_reglement_data) == [
            "DATE_DEBUT must be a valid date (ISO format: YYYY-MM-DDTHH:mm:ssZ)"
        ]


class TestReglementValues:
    """Test insert value construction"""

    def test_values_in_column_order(self, sample_reglement_data):
        values = reglement_values(sample_reglement_data)
        assert len(values) == 15
        assert values[0] == 1
        assert values[1] == "CT-2024-001"
        assert values[3] == "2024-03-01T10:15:30.123Z"
        assert values[11] == 450.5


class TestCleanUpdateFields:
    """Test partial update filtering"""

    def test_coercion(self):
        fields, errors = clean_update_fields(
            {"MONTANT": "10", "id_salle": "2", "CLIENT": " Martin "}, lambda salle_id: True
        )
        assert errors == []
        assert fields == {"MONTANT": 10.0, "id_salle": 2, "CLIENT": "Martin"}

    def test_null_date_clears_field(self):
        fields, errors = clean_update_fields({"DATE_FIN": None}, lambda salle_id: True)
        assert errors == []
        assert fields == {"DATE_FIN": None}

    def test_null_text_and_number_skipped(self):
        fields, errors = clean_update_fields({"CLIENT": None, "MONTANT": None}, lambda salle_id: True)
        assert fields == {}
        assert errors == []

    def test_errors(self):
        fields, errors = clean_update_fields(
            {"foo": 1, "MONTANT": "x", "id_salle": "y", "DATE_FIN": "soon", "MODE": ""},
            lambda salle_id: True,
        )
        assert fields == {}
        assert errors == [
            "Field 'foo' is not allowed to be updated",
            "MONTANT must be a valid number",
            "id_salle must be a valid number",
            "DATE_FIN must be a valid date (ISO format: YYYY-MM-DDTHH:mm:ssZ)",
            "MODE cannot be empty",
        ]

    def test_unknown_salle(self):
        fields, errors = clean_update_fields({"id_salle": 9}, lambda salle_id: False)
        assert errors == ["Salle with id 9 not found"]

    def test_to_columns(self):
        assert to_columns({"id_salle": 2, "CLIENT": "A"}) == {"id_salle_id": 2, "CLIENT": "A"}
