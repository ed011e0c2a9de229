"""
Tests for shared validators.

Covers plant name validation and normalisation, coordinates, photo checks
and recovery of JSON objects from model replies.
"""

import pytest

from app.shared.utils.validators import (
    clean_plant_name,
    fold_for_search,
    normalize_scientific_name,
    parse_json_object,
    sanitize_filename,
    strip_code_fences,
    validate_coordinates,
    validate_image_file,
    validate_plant_name,
)


class TestPlantNameValidation:
    """Tests for typed plant names."""

    @pytest.mark.parametrize("name", [
        "Monstera deliciosa",
        "Rosa × damascena",
        "St. John's wort",
        "Acer (maple)",
        "Devil’s ivy",
        'Prunus "Kanzan"',
        "Érable rouge",
    ])
    def test_accepts_realistic_names(self, name):
        assert validate_plant_name(name).is_valid

    @pytest.mark.parametrize("name", [None, "", "   "])
    def test_missing_name_is_required(self, name):
        result = validate_plant_name(name)

        assert not result.is_valid
        assert result.errors == ["Plant name is required"]

    def test_rejects_overlong_name(self):
        result = validate_plant_name("a" * 201)

        assert not result.is_valid
        assert "at most 200" in result.errors[0]

    def test_accepts_name_at_length_limit(self):
        assert validate_plant_name("a" * 200).is_valid

    @pytest.mark.parametrize("name", ["rose\x00bud", "fern\x1b[0m", "ivy\x7f"])
    def test_rejects_control_characters(self, name):
        result = validate_plant_name(name)

        assert not result.is_valid
        assert "Plant name contains control characters" in result.errors


class TestNameNormalisation:
    """Tests for cleaning and keying names."""

    def test_clean_collapses_whitespace_and_keeps_case(self):
        assert clean_plant_name("  Ficus   Lyrata \n") == "Ficus Lyrata"

    def test_scientific_key_is_case_and_space_insensitive(self):
        keys = {normalize_scientific_name(n) for n in ["Ficus lyrata", " ficus  lyrata", "FICUS LYRATA"]}

        assert keys == {"ficus lyrata"}

    def test_search_folding_handles_accents_and_sharp_s(self):
        assert fold_for_search(" Érable  ROUGE ") == "érable rouge"
        assert fold_for_search("Straußgras") == "strassgras"
        assert fold_for_search("ｆｅｒｎ") == "fern"


class TestCoordinates:
    def test_bounds_are_inclusive(self):
        assert validate_coordinates(90.0, -180.0).is_valid

    def test_out_of_range_reports_both(self):
        result = validate_coordinates(91.0, 181.0)

        assert not result.is_valid
        assert len(result.errors) == 2


class TestImageFileValidation:
    def test_rejects_empty_photo(self):
        assert not validate_image_file("leaf.jpg", 0, "image/jpeg").is_valid

    def test_rejects_oversized_photo(self):
        result = validate_image_file("leaf.jpg", 11 * 1024 * 1024, "image/jpeg")

        assert not result.is_valid
        assert "10MB" in result.errors[0]

    def test_rejects_unsupported_type(self):
        assert not validate_image_file("leaf.gif", 1024, "image/gif").is_valid

    def test_unexpected_extension_is_only_a_warning(self):
        result = validate_image_file("leaf.heic", 1024, "image/jpeg")

        assert result.is_valid
        assert result.warnings


class TestModelReplyParsing:
    """Tests for recovering JSON objects from generative replies."""

    def test_strips_json_code_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_parses_plain_object(self):
        assert parse_json_object('{"isValidPlant": true}') == {"isValidPlant": True}

    def test_parses_fenced_object(self):
        assert parse_json_object('```json\n{"family": "Moraceae"}\n```') == {"family": "Moraceae"}

    def test_recovers_object_wrapped_in_prose(self):
        text = 'Here is the result: {"scientificName": "Ficus lyrata"} Hope this helps!'

        assert parse_json_object(text) == {"scientificName": "Ficus lyrata"}

    @pytest.mark.parametrize("text", [None, "", "no json here", "[1, 2, 3]", "{broken"])
    def test_unusable_reply_raises_value_error(self, text):
        with pytest.raises(ValueError):
            parse_json_object(text)


class TestSanitizeFilename:
    def test_removes_path_components(self):
        assert "/" not in sanitize_filename("../../etc/passwd")

    def test_empty_name_gets_placeholder(self):
        assert sanitize_filename("") == "unnamed_file"
