import unittest

from fake_network import NODE_3, OPERATOR_ID, fake_signer
from ledger_core import (
    AccountId,
    AccountInfoQuery,
    FileContentsQuery,
    Hbar,
    PaymentTransaction,
    ResponseType,
    TransferPaymentBuilder,
)
from ledger_core.payment import transfer_amount
from ledger_core.wire import decode_message, encode_message


class TestTransferPaymentBuilder(unittest.TestCase):
    def setUp(self):
        self.builder = TransferPaymentBuilder(clock=lambda: 1700000000.25)

    def test_builds_signed_transfer_to_node(self):
        payment = self.builder.build(
            OPERATOR_ID, NODE_3.account_id, Hbar.from_tinybar(80), Hbar.of(1), fake_signer()
        )
        body = payment.body()

        self.assertEqual(self.builder.target_node(payment), NODE_3.account_id)
        self.assertEqual(body["transactionID"]["accountID"], "0.0.2")
        self.assertEqual(body["transactionID"]["transactionValidStart"]["seconds"], "1700000000")
        self.assertEqual(body["transactionFee"], "100000000")
        self.assertEqual(transfer_amount(payment, NODE_3.account_id), 80)
        self.assertEqual(transfer_amount(payment, OPERATOR_ID), -80)
        [(public_key, signature)] = payment.signatures
        self.assertEqual(public_key, b"operator-key")
        self.assertEqual(signature, b"sig" + payment.body_bytes[:8])

    def test_serialized_form_carries_body_and_signatures(self):
        payment = self.builder.build(
            OPERATOR_ID, NODE_3.account_id, Hbar.zero(), Hbar.of(1), fake_signer()
        )

        restored = PaymentTransaction.from_dict(decode_message(encode_message(payment.to_dict())))

        self.assertEqual(restored, payment)

    def test_payment_without_node_is_rejected(self):
        payment = PaymentTransaction(body_bytes=encode_message({"transactionFee": "1"}))

        with self.assertRaises(ValueError):
            payment.node_account_id()


class TestWireForm(unittest.TestCase):
    def test_query_wire_form(self):
        query = AccountInfoQuery().set_account_id(AccountId(0, 0, 5))
        wire = query.to_wire_form()

        self.assertEqual(
            wire.to_dict(),
            {"cryptoGetInfo": {"header": {"responseType": "ANSWER_ONLY"}, "accountID": "0.0.5"}},
        )
        clone = wire.clone()
        clone.header.response_type = ResponseType.COST_ANSWER
        self.assertEqual(wire.header.response_type, ResponseType.ANSWER_ONLY)

    def test_file_contents_response_mapping(self):
        query = FileContentsQuery().set_file_id("0.0.111")
        response = {"fileGetContents": {"header": {}, "fileContents": {"contents": "aGVsbG8="}}}

        self.assertEqual(query._map_response(response), b"hello")
        self.assertEqual(query._map_response_header(response).cost, 0)


if __name__ == '__main__':
    unittest.main()
