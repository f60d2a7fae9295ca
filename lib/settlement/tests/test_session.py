#!/usr/bin/env python3
"""
Unit tests for SplitSession, receipt drafts and money helpers
"""

import unittest
from decimal import Decimal

import sys
from pathlib import Path
# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from lib.ocr.text_parser import parse_receipt_text
from lib.settlement.models import LineItem, Receipt
from lib.settlement.money import format_money, round_money, to_money
from lib.settlement.session import (
    ItemNotFoundError,
    NoActiveReceiptError,
    ParticipantNotFoundError,
    SessionError,
    SplitSession,
)


class TestMoney(unittest.TestCase):

    def test_to_money_accepts_common_inputs(self):
        self.assertEqual(to_money("12.50"), Decimal("12.50"))
        self.assertEqual(to_money(" $1,234.56 "), Decimal("1234.56"))
        self.assertEqual(to_money(3), Decimal("3"))
        self.assertEqual(to_money(0.1), Decimal("0.1"))

    def test_to_money_is_lenient(self):
        for bad in [None, "", "abc", "NaN", "Infinity", True, object()]:
            self.assertEqual(to_money(bad), Decimal("0"), msg=repr(bad))
        self.assertEqual(to_money("abc", default=Decimal("1")), Decimal("1"))

    def test_to_money_rejects_huge_amounts(self):
        for huge in ["1e30", "99999999999999999999999999999", Decimal("1E+40"), 10 ** 30, "-1e12"]:
            self.assertEqual(to_money(huge), Decimal("0"), msg=repr(huge))
        self.assertEqual(to_money("999999999.99"), Decimal("999999999.99"))

    def test_rounding_and_formatting(self):
        self.assertEqual(round_money(Decimal("2.345")), Decimal("2.35"))
        self.assertEqual(format_money(Decimal("10") / 3), "3.33")
        self.assertEqual(format_money(Decimal("5")), "5.00")


class TestReceiptDraft(unittest.TestCase):

    def test_from_ocr_result_numbers_items(self):
        result = parse_receipt_text("Burger $12.99\nFries $5.99\nTotal: $20.69")
        receipt = Receipt.from_ocr_result(result)

        self.assertEqual([item.id for item in receipt.items], ["1", "2"])
        self.assertTrue(all(item.assigned_to == set() for item in receipt.items))
        self.assertEqual(receipt.total, Decimal("20.69"))
        self.assertEqual(receipt.subtotal, Decimal("20.69"))

    def test_line_item_price_is_lenient(self):
        self.assertEqual(LineItem(id="1", name="x", price="oops").price, Decimal("0"))
        self.assertEqual(LineItem(id="1", name="x", price="-4").price, Decimal("0"))

    def test_next_item_id(self):
        receipt = Receipt(items=[LineItem(id="1", name="a"), LineItem(id="7", name="b")])
        self.assertEqual(receipt.next_item_id(), "8")
        self.assertEqual(Receipt().next_item_id(), "1")

    def test_to_dict_formats_money(self):
        receipt = Receipt(subtotal="10", tax="0.8", tip=2, total="12.8")
        data = receipt.to_dict()
        self.assertEqual(data['subtotal'], "10.00")
        self.assertEqual(data['tax'], "0.80")
        self.assertEqual(data['total'], "12.80")


class TestSplitSession(unittest.TestCase):

    def setUp(self):
        self.session = SplitSession()
        self.alice = self.session.add_participant("Alice")
        self.bob = self.session.add_participant("  Bob ")
        self.session.load_ocr_result(
            parse_receipt_text("Pizza 20.00\nSoda 4.00\nTax: $2.40\nTip: $3.60")
        )

    def test_participants_have_unique_ids(self):
        ids = {p.id for p in self.session.participants}
        self.assertEqual(len(ids), 2)
        self.assertEqual(self.bob.name, "Bob")

    def test_blank_participant_name_rejected(self):
        with self.assertRaises(SessionError):
            self.session.add_participant("   ")

    def test_rename_and_remove_participant(self):
        self.session.rename_participant(self.bob.id, "Robert")
        self.assertEqual(self.session.get_participant(self.bob.id).name, "Robert")

        self.session.remove_participant(self.bob.id)
        with self.assertRaises(ParticipantNotFoundError):
            self.session.get_participant(self.bob.id)

    def test_removing_participant_keeps_assignments(self):
        self.session.toggle_assignment("1", self.bob.id)
        self.session.remove_participant(self.bob.id)
        self.assertIn(self.bob.id, self.session.get_item("1").assigned_to)

    def test_toggle_assignment_round_trip(self):
        item = self.session.get_item("1")
        self.session.toggle_assignment("1", self.alice.id)
        before = set(item.assigned_to)

        self.assertTrue(self.session.toggle_assignment("1", self.bob.id))
        self.assertFalse(self.session.toggle_assignment("1", self.bob.id))
        self.assertEqual(item.assigned_to, before)

    def test_toggle_unknown_ids(self):
        with self.assertRaises(ItemNotFoundError):
            self.session.toggle_assignment("99", self.alice.id)
        with self.assertRaises(ParticipantNotFoundError):
            self.session.toggle_assignment("1", "nobody")

    def test_item_editing(self):
        item = self.session.add_item("Salad", "7.50")
        self.assertEqual(item.id, "3")
        self.assertEqual(item.price, Decimal("7.50"))

        self.session.update_item("3", name=" Caesar ", price="not a number")
        self.assertEqual(self.session.get_item("3").name, "Caesar")
        self.assertEqual(self.session.get_item("3").price, Decimal("0"))

        self.session.remove_item("3")
        with self.assertRaises(ItemNotFoundError):
            self.session.get_item("3")

    def test_update_items_replaces_list(self):
        self.session.update_items([LineItem(id="1", name="Only", price="1.00")])
        self.assertEqual([i.name for i in self.session.receipt.items], ["Only"])

    def test_update_totals_recomputes_total(self):
        receipt = self.session.update_totals("24.00", "bad", "$5")
        self.assertEqual(receipt.tax, Decimal("0"))
        self.assertEqual(receipt.total, Decimal("29.00"))

    def test_huge_edits_fall_back_to_zero(self):
        self.session.update_item("1", price="1e30")
        receipt = self.session.update_totals("99999999999999999999999999999", "2.40", "3.60")
        self.session.toggle_assignment("1", self.bob.id)

        self.assertEqual(self.session.get_item("1").price, Decimal("0"))
        self.assertEqual(receipt.subtotal, Decimal("0"))
        self.assertEqual(receipt.to_dict()["total"], "6.00")
        self.assertEqual(self.session.settle(), [])

    def test_operations_require_receipt(self):
        session = SplitSession()
        with self.assertRaises(NoActiveReceiptError):
            session.add_item("x", "1.00")
        with self.assertRaises(NoActiveReceiptError):
            session.update_totals(1, 2, 3)
        self.assertEqual(session.settle(), [])

    def test_settle(self):
        self.session.toggle_assignment("1", self.alice.id)
        self.session.toggle_assignment("1", self.bob.id)
        self.session.toggle_assignment("2", self.bob.id)

        settlements = self.session.settle()

        # bob: 10 pizza + 4 soda + (14/24 of 6.00 tax and tip)
        self.assertEqual(len(settlements), 1)
        self.assertEqual(settlements[0].from_participant, self.bob.id)
        self.assertEqual(settlements[0].to_participant, self.alice.id)
        self.assertEqual(settlements[0].amount, Decimal("17.5"))
        self.assertEqual(self.session.owed()[self.alice.id], Decimal("12.5"))

    def test_serialization_round_trip(self):
        self.session.toggle_assignment("2", self.bob.id)
        data = self.session.model_dump(mode="json")
        restored = SplitSession.model_validate(data)

        self.assertEqual(restored.participants, self.session.participants)
        self.assertEqual(restored.get_item("2").assigned_to, {self.bob.id})
        self.assertEqual(restored.receipt.tax, Decimal("2.40"))
        self.assertEqual(restored.settle(), self.session.settle())


if __name__ == '__main__':
    unittest.main()
