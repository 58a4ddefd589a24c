"""Tests for charge tokenizing and classification."""
import unittest

from arrests.charges import CATEGORIES, OTHER, classify_charge, tokenize_charges


class TokenizeChargesTest(unittest.TestCase):
    def test_empty_inputs(self) -> None:
        self.assertEqual([], tokenize_charges(None))
        self.assertEqual([], tokenize_charges(""))
        self.assertEqual([], tokenize_charges(" , ,"))

    def test_trims_and_drops_empties(self) -> None:
        self.assertEqual(["A", "B"], tokenize_charges("A, , B"))
        self.assertEqual(
            ["OUI - Alcohol", "Negligent Operation"],
            tokenize_charges("OUI - Alcohol, Negligent Operation"),
        )

    def test_duplicates_are_kept(self) -> None:
        self.assertEqual(["Trespass", "Trespass"], tokenize_charges("Trespass,Trespass"))


class ClassifyChargeTest(unittest.TestCase):
    def test_categories(self) -> None:
        cases = {
            "Assault & Battery": "Assault",
            "Shoplifting by Larceny": "Theft",
            "Class B Controlled Substance": "Drug",
            "OUI - Alcohol": "Traffic",
            "Unlicensed Operation of Motor Vehicle": "Traffic",
            "Default Warrant": "Warrant",
            "Carrying a Dangerous Weapon": "Weapon",
            "Disorderly Conduct": "Disorderly Conduct",
            "Trespass": "Disorderly Conduct",
            "Domestic Disturbance": "Disorderly Conduct",
            "Domestic Threats": "Domestic Violence",
            "Credit Card Fraud": "Fraud",
            "Malicious Destruction of Property": "Vandalism",
        }
        for charge, expected in cases.items():
            self.assertEqual(expected, classify_charge(charge), charge)

    def test_case_insensitive(self) -> None:
        self.assertEqual("Theft", classify_charge("larceny under $250"))

    def test_first_rule_wins(self) -> None:
        self.assertEqual("Drug", classify_charge("POSSESSION OF FIREARM"))
        self.assertEqual("Drug", classify_charge("Possession, Domestic"))
        self.assertEqual("Assault", classify_charge("Assault with a Dangerous Weapon"))

    def test_no_match(self) -> None:
        self.assertEqual(OTHER, classify_charge("JAYWALKING"))
        self.assertEqual(OTHER, classify_charge(""))

    def test_every_result_is_a_known_category(self) -> None:
        for charge in ["Resisting Arrest", "A&B on Police Officer", "Negligent Operation"]:
            self.assertIn(classify_charge(charge), CATEGORIES)
