"""Customer repository."""

from __future__ import annotations

import sqlite3

from ..models import Customer
from .rows import new_id, row_to_customer


class CustomerRepository:
    """Customer CRUD. Rentals hold snapshots, so edits here never touch the ledger."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def list_all(self) -> list[Customer]:
        cursor = self.conn.execute("SELECT * FROM customers ORDER BY name")
        return [row_to_customer(row) for row in cursor.fetchall()]

    def get(self, customer_id: str) -> Customer | None:
        row = self.conn.execute("SELECT * FROM customers WHERE id = ?", (customer_id,)).fetchone()
        return row_to_customer(row) if row else None

    def create(
        self,
        name: str,
        phone: str,
        is_gold: bool = False,
        customer_id: str | None = None,
    ) -> Customer:
        customer = Customer(id=customer_id or new_id(), name=name, phone=phone, is_gold=is_gold)
        self.conn.execute(
            "INSERT INTO customers (id, name, phone, is_gold) VALUES (?, ?, ?, ?)",
            (customer.id, customer.name, customer.phone, int(customer.is_gold)),
        )
        return customer

    def update(self, customer_id: str, name: str, phone: str, is_gold: bool) -> Customer | None:
        cursor = self.conn.execute(
            "UPDATE customers SET name = ?, phone = ?, is_gold = ? WHERE id = ?",
            (name, phone, int(is_gold), customer_id),
        )
        if cursor.rowcount == 0:
            return None
        return Customer(id=customer_id, name=name, phone=phone, is_gold=is_gold)

    def delete(self, customer_id: str) -> Customer | None:
        customer = self.get(customer_id)
        if customer is None:
            return None
        self.conn.execute("DELETE FROM customers WHERE id = ?", (customer_id,))
        return customer
