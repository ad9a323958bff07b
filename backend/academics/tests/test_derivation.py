from datetime import date

from django.test import SimpleTestCase, override_settings

from ..derivation import (
    SemesterStatus,
    derive_admission_year,
    derive_batch_range,
    derive_current_semester,
    derive_institutional_email,
    derive_semester_status,
    parse_boolean_flag,
    parse_full_name,
    resolve_program_semesters,
    semester_status_map,
)

CLEARED = SemesterStatus.CLEARED
PENDING = SemesterStatus.PENDING


class SemesterStatusTests(SimpleTestCase):
    def test_codes(self):
        self.assertEqual(derive_semester_status("2"), CLEARED)
        self.assertEqual(derive_semester_status(2), CLEARED)
        self.assertEqual(derive_semester_status(" 2.0 "), CLEARED)
        self.assertEqual(derive_semester_status("1"), PENDING)

    def test_other_values_are_not_attempted(self):
        for raw in (None, "", "  ", "0", "3", "-1", "abc"):
            with self.subTest(raw=raw):
                self.assertEqual(derive_semester_status(raw), SemesterStatus.NOT_ATTEMPTED)

    def test_status_map_fills_every_slot(self):
        status = semester_status_map({1: "2", 2: "1"})
        self.assertEqual(len(status), 8)
        self.assertEqual(status["sem1"], CLEARED)
        self.assertEqual(status["sem2"], PENDING)
        self.assertEqual(status["sem8"], SemesterStatus.NOT_ATTEMPTED)


class CurrentSemesterTests(SimpleTestCase):
    def test_six_cleared_of_eight(self):
        statuses = {n: CLEARED for n in range(1, 7)}
        self.assertEqual(derive_current_semester(statuses, 8), 7)

    def test_nothing_attempted(self):
        self.assertEqual(derive_current_semester({}, 6), 1)
        self.assertEqual(derive_current_semester(None, 8), 1)

    def test_capped_at_program_length(self):
        statuses = {n: CLEARED for n in range(1, 7)}
        self.assertEqual(derive_current_semester(statuses, 6), 6)

    def test_first_semester_cleared(self):
        self.assertEqual(derive_current_semester({1: CLEARED}, 8), 2)

    def test_pending_counts_as_attempted(self):
        self.assertEqual(derive_current_semester({1: CLEARED, 2: CLEARED, 3: PENDING}, 8), 4)

    def test_highest_attempted_wins_over_gaps(self):
        self.assertEqual(derive_current_semester({1: CLEARED, 4: PENDING}, 8), 5)

    def test_stored_keys(self):
        stored = {"sem1": "CLEARED", "sem2": "CLEARED", "sem3": "NOT_ATTEMPTED"}
        self.assertEqual(derive_current_semester(stored, 8), 3)

    def test_semesters_beyond_program_are_ignored(self):
        self.assertEqual(derive_current_semester({7: CLEARED}, 6), 1)

    def test_program_length_is_required(self):
        with self.assertRaises(ValueError):
            derive_current_semester({}, None)
        with self.assertRaises(ValueError):
            derive_current_semester({}, 9)


class AdmissionYearTests(SimpleTestCase):
    def test_four_digit_prefix(self):
        self.assertEqual(derive_admission_year("20230045"), 2023)

    def test_two_digit_prefix(self):
        self.assertEqual(derive_admission_year("230045"), 2023)

    def test_falls_back_to_current_year(self):
        today = date(2026, 7, 1)
        self.assertEqual(derive_admission_year("abc", today=today), 2026)
        self.assertEqual(derive_admission_year("", today=today), 2026)
        # neither 9912 nor 2099 is a plausible admission year
        self.assertEqual(derive_admission_year("99120001", today=today), 2026)

    def test_out_of_range_four_digits_uses_two_digit_rule(self):
        self.assertEqual(derive_admission_year("21990001"), 2021)


class NameAndFlagTests(SimpleTestCase):
    def test_two_tokens(self):
        self.assertEqual(tuple(parse_full_name("Sharma Rahul")), ("Rahul", "", "Sharma"))

    def test_three_tokens(self):
        parts = parse_full_name("Sharma Rahul Kumar")
        self.assertEqual((parts.first, parts.middle, parts.last), ("Rahul", "Kumar", "Sharma"))

    def test_single_token(self):
        self.assertEqual(tuple(parse_full_name("Rahul")), ("Rahul", "", ""))

    def test_four_tokens_kept_whole(self):
        self.assertEqual(parse_full_name("  Van  der Berg Anna ").first, "Van der Berg Anna")

    def test_boolean_flag(self):
        for raw in ("1", "true", "TRUE", " yes "):
            self.assertTrue(parse_boolean_flag(raw), raw)
        for raw in (None, "", "0", "no", "y", "2"):
            self.assertFalse(parse_boolean_flag(raw), raw)


class EmailAndProgramTests(SimpleTestCase):
    def test_email_lowercases_enrollment(self):
        self.assertEqual(derive_institutional_email("22CE001", domain="uni.edu"), "22ce001@uni.edu")

    @override_settings(ACADEMICS={"INSTITUTION_EMAIL_DOMAIN": "college.ac.in"})
    def test_email_uses_configured_domain(self):
        self.assertEqual(derive_institutional_email("20230001"), "20230001@college.ac.in")

    def test_batch_range(self):
        self.assertEqual(derive_batch_range(2023, 8), "2023-2027")
        self.assertEqual(derive_batch_range(2023, 6), "2023-2026")

    def test_program_length_resolution(self):
        self.assertEqual(resolve_program_semesters(6, 8), 6)
        self.assertEqual(resolve_program_semesters(None, 8), 8)
        self.assertIsNone(resolve_program_semesters(None, None))
        with self.assertRaises(ValueError):
            resolve_program_semesters(None, 12)
