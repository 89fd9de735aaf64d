# models/shifts.py

from sqlalchemy import Column, DateTime, Index, Integer, Numeric, String, Text, text

from front_desk.models.base import Base

MONEY = Numeric(12, 2)


class Shift(Base):
    """
    ORM model for an operator's cash-drawer session.

    At most one open shift per operator is enforced by a partial unique index on
    operator_id where status = 'open'. Running totals are incremented atomically
    in SQL; expected_cash and cash_difference are written at close.
    """

    __tablename__ = "shifts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    operator_id = Column(Integer, nullable=False, index=True)
    status = Column(String(10), nullable=False, server_default="open")
    opened_at = Column(DateTime(timezone=True), nullable=False)
    closed_at = Column(DateTime(timezone=True), nullable=True)

    opening_cash = Column(MONEY, nullable=False, server_default="0")
    closing_cash = Column(MONEY, nullable=True)
    expected_cash = Column(MONEY, nullable=True)
    cash_difference = Column(MONEY, nullable=True)

    total_cash_sales = Column(MONEY, nullable=False, server_default="0")
    total_card_sales = Column(MONEY, nullable=False, server_default="0")
    total_transfer_sales = Column(MONEY, nullable=False, server_default="0")
    total_sales = Column(MONEY, nullable=False, server_default="0")
    total_cash_count = Column(Integer, nullable=False, server_default="0")
    total_card_count = Column(Integer, nullable=False, server_default="0")
    total_transfer_count = Column(Integer, nullable=False, server_default="0")
    total_transactions = Column(Integer, nullable=False, server_default="0")

    check_ins_count = Column(Integer, nullable=False, server_default="0")
    check_outs_count = Column(Integer, nullable=False, server_default="0")
    bookings_created_count = Column(Integer, nullable=False, server_default="0")

    opening_notes = Column(Text, nullable=True)
    closing_notes = Column(Text, nullable=True)

    __table_args__ = (
        Index(
            "uq_shifts_one_open_per_operator",
            "operator_id",
            unique=True,
            postgresql_where=text("status = 'open'"),
            sqlite_where=text("status = 'open'"),
        ),
    )
