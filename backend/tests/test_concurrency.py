# Overview: Threaded concurrency tests for the stock ledger on a file-backed database.

"""
Concurrent writers against one product must be serialized: the second writer
re-reads the quantity left by the first and never overdraws it.
"""
import os
import tempfile
import threading
import unittest
from decimal import Decimal

from polimarket import create_app
from polimarket.errors import InsufficientStock
from polimarket.extensions import db
from polimarket.models import MovementKind, Sale, StockMovement
from polimarket.services import (
    inventory_service,
    ledger_service,
    party_service,
    products_service,
    sales_service,
)


class ConcurrencyTests(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        db_path = os.path.join(self.tmpdir.name, "concurrency.db")
        self.app = create_app({
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_path}",
        })

        with self.app.app_context():
            db.drop_all()
            db.create_all()

            seller = party_service.create_party(
                name="Concurrent Seller", document="S-1", profile="SELLER"
            )
            self.seller_id = seller.id

            customer = party_service.create_party(
                name="Concurrent Customer", document="C-1", profile="CUSTOMER"
            )
            self.customer_id = customer.id

            receipt = products_service.create_product(
                name="Concurrent Product",
                sale_unit="unit",
                unit_price=Decimal("10.00"),
                initial_quantity=10,
            )
            self.product_id = receipt.id

    def tearDown(self):
        with self.app.app_context():
            db.session.remove()
            db.drop_all()
            db.session.remove()
            db.engine.dispose()
        self.tmpdir.cleanup()

    def _run_concurrently(self, target, count):
        results = []
        lock = threading.Lock()
        barrier = threading.Barrier(count)

        def worker():
            with self.app.app_context():
                try:
                    barrier.wait()
                    outcome = target()
                    with lock:
                        results.append(outcome)
                except Exception as exc:
                    with lock:
                        results.append(exc)
                finally:
                    db.session.remove()

        threads = [threading.Thread(target=worker) for _ in range(count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        return results

    def test_concurrent_outbound_oversell(self):
        results = self._run_concurrently(
            lambda: inventory_service.register_movement(
                self.product_id, self.seller_id, "OUTBOUND", 6
            ),
            2,
        )

        failures = [r for r in results if isinstance(r, Exception)]
        self.assertEqual(len(results), 2)
        self.assertEqual(len(failures), 1)
        self.assertIsInstance(failures[0], InsufficientStock)

        with self.app.app_context():
            self.assertEqual(ledger_service.get_available(self.product_id), 4)
            self.assertTrue(ledger_service.reconcile(self.product_id)["consistent"])

    def test_concurrent_sale_oversell(self):
        results = self._run_concurrently(
            lambda: sales_service.process_sale(
                self.customer_id, None, [(self.product_id, 6)]
            ),
            2,
        )

        failures = [r for r in results if isinstance(r, Exception)]
        self.assertEqual(len(failures), 1)
        # The loser either fails the advisory check or the locked re-check
        self.assertIn(failures[0].code, {"INSUFFICIENT_STOCK", "BUSINESS_RULE_VIOLATION"})

        with self.app.app_context():
            self.assertEqual(ledger_service.get_available(self.product_id), 4)
            self.assertEqual(db.session.query(Sale).count(), 1)

    def test_concurrent_inbound_is_not_lost(self):
        results = self._run_concurrently(
            lambda: ledger_service.apply_delta(
                self.product_id,
                MovementKind.INBOUND,
                1,
                self.seller_id,
            ).id,
            8,
        )

        self.assertFalse([r for r in results if isinstance(r, Exception)])

        with self.app.app_context():
            self.assertEqual(ledger_service.get_available(self.product_id), 18)
            self.assertEqual(
                db.session.query(StockMovement).filter_by(product_id=self.product_id).count(),
                9,
            )
            self.assertTrue(ledger_service.reconcile(self.product_id)["consistent"])


if __name__ == "__main__":
    unittest.main()
