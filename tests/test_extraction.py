"""Tests for CNIC detection and rule-based card field extraction."""

import pytest

from src.extraction.cnic import find_cnic, is_valid_cnic, normalize_cnic
from src.extraction.rule_extractor import CardFields, RuleExtractor, clean_name


class TestNormalizeCnic:
    """Tests for CNIC normalization."""

    @pytest.mark.parametrize(
        "value",
        ["3410474419921", "34104-7441992-1", "34104 7441992 1", " 34104.7441992.1 "],
    )
    def test_thirteen_digits_normalized(self, value: str) -> None:
        assert normalize_cnic(value) == "34104-7441992-1"

    @pytest.mark.parametrize("value", [None, "", "12345", "34104-7441992-12"])
    def test_wrong_length_rejected(self, value: str | None) -> None:
        assert normalize_cnic(value) is None

    def test_is_valid_cnic(self) -> None:
        assert is_valid_cnic("34104-7441992-1")
        assert not is_valid_cnic("3410474419921")
        assert not is_valid_cnic(None)


class TestFindCnic:
    """Tests for the ordered CNIC patterns."""

    def test_dashed(self) -> None:
        match = find_cnic("Identity Number 34104-7441992-1")
        assert match is not None
        assert match.value == "34104-7441992-1"
        assert match.pattern == "dashed"
        assert match.start == len("Identity Number ")

    def test_spaced(self) -> None:
        match = find_cnic("CNIC 34104 7441992 1")
        assert match.value == "34104-7441992-1"
        assert match.pattern == "spaced"

    def test_bare_digits(self) -> None:
        match = find_cnic("...3410474419921...")
        assert match.value == "34104-7441992-1"
        assert match.pattern == "bare"

    def test_bare_digits_next_to_letters(self) -> None:
        assert find_cnic("CNIC3410474419921X").value == "34104-7441992-1"

    def test_mixed_separators(self) -> None:
        match = find_cnic("No. 34104 7441992-1")
        assert match.value == "34104-7441992-1"
        assert match.pattern == "mixed"

    def test_spaces_around_dashes(self) -> None:
        match = find_cnic("CNIC: 34104 - 7441992 - 1")
        assert match.value == "34104-7441992-1"
        assert match.pattern == "mixed"

    def test_dashed_preferred_over_bare(self) -> None:
        match = find_cnic("3520212345678 then 34104-7441992-1")
        assert match.value == "34104-7441992-1"

    def test_longer_digit_run_ignored(self) -> None:
        assert find_cnic("Serial 34104744199210") is None

    def test_no_cnic(self) -> None:
        assert find_cnic("Phone 0300-1234567, issued 01.01.2020") is None


class TestCleanName:
    """Tests for name candidate validation."""

    def test_title_cases(self) -> None:
        assert clean_name("HAIDER ABBAS") == "Haider Abbas"

    def test_strips_trailing_punctuation(self) -> None:
        assert clean_name("Ali Raza Khan.") == "Ali Raza Khan"

    @pytest.mark.parametrize(
        "candidate",
        [
            "PAKISTAN NATIONAL",
            "CNIC HOLDER",
            "Identity Card",
            "Haider Gender M",
            "Haider 4bbas",
            "Haider",
            "One Two Three Four Five Six",
        ],
    )
    def test_rejected(self, candidate: str) -> None:
        assert clean_name(candidate) is None

    @pytest.mark.parametrize(
        ("candidate", "expected"),
        [
            ("Haider Abbas Gender M", "Haider Abbas"),
            ("MUHAMMAD ASLAM KHAN DOB", "Muhammad Aslam Khan"),
            ("Ali Raza 1990", "Ali Raza"),
        ],
    )
    def test_cut_at_first_label_word(self, candidate: str, expected: str) -> None:
        assert clean_name(candidate) == expected


class TestRuleExtractor:
    """Tests for the RuleExtractor class."""

    def setup_method(self) -> None:
        self.extractor = RuleExtractor()

    def test_identity_card_scenario(self, card_text: str) -> None:
        result = self.extractor.extract(card_text)
        assert isinstance(result, CardFields)
        assert result.full_name == "Haider Abbas"
        assert result.father_name == "Muhammad Aslam"
        assert result.cnic_number == "34104-7441992-1"
        assert result.method == "rule"

    def test_bare_cnic_scenario(self) -> None:
        result = self.extractor.extract("Identity Number ...3410474419921...")
        assert result.cnic_number == "34104-7441992-1"

    def test_no_cnic_leaves_field_empty(self) -> None:
        result = self.extractor.extract("Name: Haider Abbas\nPhone 0300-1234567")
        assert result.cnic_number is None
        assert result.full_name == "Haider Abbas"

    def test_labeled_fields(self) -> None:
        text = (
            "Name: Haider Abbas\n"
            "Father Name: Muhammad Aslam\n"
            "Identity Number 34104-7441992-1\n"
            "Date of Birth 12.03.1990"
        )
        result = self.extractor.extract(text)
        assert result.full_name == "Haider Abbas"
        assert result.father_name == "Muhammad Aslam"
        assert result.dob == "12.03.1990"

    def test_label_on_previous_line(self) -> None:
        text = "Name\nAyesha Siddiqa\nFather Name\nTariq Mehmood\n35202-1234567-8"
        result = self.extractor.extract(text)
        assert result.full_name == "Ayesha Siddiqa"
        assert result.father_name == "Tariq Mehmood"

    def test_title_case_before_cnic(self) -> None:
        text = "Government of Pakistan\nAyesha Khan Niazi\nGender F\n35202-1234567-8"
        assert self.extractor.extract(text).full_name == "Ayesha Khan Niazi"

    def test_title_case_after_cnic_ignored(self) -> None:
        text = "35202-1234567-8\nAyesha Khan Niazi"
        assert self.extractor.extract(text).full_name is None

    def test_father_phrase_not_taken_as_name(self) -> None:
        text = "D/O Tariq Mehmood\n35202-1234567-8"
        result = self.extractor.extract(text)
        assert result.full_name is None
        assert result.father_name == "Tariq Mehmood"

    def test_upper_case_outside_leading_lines_ignored(self) -> None:
        text = "identity card\nissued\ncopy\nvalid\nHAIDER ABBAS"
        assert self.extractor.extract(text).full_name is None

    def test_stoplisted_phrase_never_accepted(self) -> None:
        text = "PAKISTAN NATIONAL IDENTITY CARD\nCNIC HOLDER\n34104-7441992-1"
        result = self.extractor.extract(text)
        assert result.full_name is None
        assert result.father_name is None

    def test_name_followed_by_label_on_same_line(self) -> None:
        result = self.extractor.extract("Name: Haider Abbas Gender M\n34104-7441992-1")
        assert result.full_name == "Haider Abbas"

    def test_father_followed_by_label_on_same_line(self) -> None:
        text = "Name: Haider Abbas\nS/O Muhammad Aslam Gender M\n34104-7441992-1"
        result = self.extractor.extract(text)
        assert result.full_name == "Haider Abbas"
        assert result.father_name == "Muhammad Aslam"

    def test_father_equal_to_name_dropped(self) -> None:
        text = "Name: Ali Raza\nS/O Ali Raza\n34104-7441992-1"
        result = self.extractor.extract(text)
        assert result.full_name == "Ali Raza"
        assert result.father_name is None

    def test_dob_labeled_preferred(self) -> None:
        text = "Issue 01-01-2020\nDOB: 17-05-1990"
        assert self.extractor.extract(text).dob == "17-05-1990"

    def test_dob_iso_bare(self) -> None:
        assert self.extractor.extract("Born 1990-05-17").dob == "1990-05-17"

    def test_empty_text(self) -> None:
        result = self.extractor.extract("")
        assert result == CardFields()
