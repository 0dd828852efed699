from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import psycopg
from psycopg.types.json import Jsonb

from splitbill.domain.models import Expense, Participant, PaymentMethodSnapshot, SplitBillSummary

RECORD_STATUS_LOCKED = "locked"


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class ParticipantRecord:
    id: str
    name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


@dataclass(frozen=True)
class SplitBillRecord:
    """
    A saved bill. participants/expenses/summary/payment_methods are the JSON
    payloads exactly as they were when the bill was saved.
    """
    id: str
    owner_id: str
    activity_name: str
    occurred_at: datetime
    participants: List[Dict[str, Any]]
    expenses: List[Dict[str, Any]]
    additional_expenses: List[Dict[str, Any]]
    summary: Dict[str, Any]
    status: str
    payment_methods: List[Dict[str, Any]] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "activity_name": self.activity_name,
            "occurred_at": _iso(self.occurred_at),
            "participants": self.participants,
            "expenses": self.expenses,
            "additional_expenses": self.additional_expenses,
            "summary": self.summary,
            "payment_methods": self.payment_methods,
            "status": self.status,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


_SPLIT_BILL_COLUMNS = """
    id::text, owner_id, activity_name, occurred_at, participants, expenses,
    additional_expenses, summary, status, payment_methods, created_at, updated_at
"""


def _split_bill_from_row(row: Sequence[Any]) -> SplitBillRecord:
    return SplitBillRecord(
        id=row[0],
        owner_id=row[1],
        activity_name=row[2],
        occurred_at=row[3],
        participants=list(row[4] or []),
        expenses=list(row[5] or []),
        additional_expenses=list(row[6] or []),
        summary=dict(row[7] or {}),
        status=row[8],
        payment_methods=list(row[9] or []),
        created_at=row[10],
        updated_at=row[11],
    )


class SplitBillRepository:
    def __init__(self, database_url: str):
        self.database_url = database_url.strip()

    @property
    def enabled(self) -> bool:
        return bool(self.database_url)

    def _connect(self):
        if not self.enabled:
            raise RuntimeError("DATABASE_URL not configured")
        return psycopg.connect(self.database_url)

    def list_participants(self, *, owner_id: str) -> list[ParticipantRecord]:
        with self._connect() as conn, conn.cursor() as cur:
            cur.execute(
                """
                SELECT id::text, name, created_at, updated_at
                FROM participants
                WHERE owner_id = %s
                ORDER BY created_at ASC, name ASC
                """,
                (owner_id,),
            )
            return [
                ParticipantRecord(id=row[0], name=row[1], created_at=row[2], updated_at=row[3])
                for row in cur.fetchall()
            ]

    def find_participant_by_name(self, *, owner_id: str, name: str) -> Optional[ParticipantRecord]:
        with self._connect() as conn, conn.cursor() as cur:
            cur.execute(
                """
                SELECT id::text, name, created_at, updated_at
                FROM participants
                WHERE owner_id = %s AND lower(btrim(name)) = lower(btrim(%s))
                LIMIT 1
                """,
                (owner_id, name),
            )
            row = cur.fetchone()
            if row is None:
                return None
            return ParticipantRecord(id=row[0], name=row[1], created_at=row[2], updated_at=row[3])

    def create_participant(self, *, owner_id: str, name: str) -> ParticipantRecord:
        with self._connect() as conn, conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO participants (owner_id, name)
                VALUES (%s, %s)
                RETURNING id::text, name, created_at, updated_at
                """,
                (owner_id, name),
            )
            row = cur.fetchone()
            conn.commit()
            return ParticipantRecord(id=row[0], name=row[1], created_at=row[2], updated_at=row[3])

    def delete_participant(self, *, owner_id: str, participant_id: str) -> bool:
        with self._connect() as conn, conn.cursor() as cur:
            cur.execute(
                """
                DELETE FROM participants
                WHERE owner_id = %s AND id = %s
                """,
                (owner_id, participant_id),
            )
            deleted = cur.rowcount > 0
            conn.commit()
            return deleted

    def create_split_bill(
        self,
        *,
        owner_id: str,
        activity_name: str,
        occurred_at: datetime,
        participants: Sequence[Participant],
        expenses: Sequence[Expense],
        additional_expenses: Sequence[Expense],
        summary: SplitBillSummary,
        payment_methods: Sequence[PaymentMethodSnapshot] = (),
        status: str = RECORD_STATUS_LOCKED,
    ) -> SplitBillRecord:
        with self._connect() as conn, conn.cursor() as cur:
            cur.execute(
                f"""
                INSERT INTO split_bills (
                    owner_id, activity_name, occurred_at, participants, expenses,
                    additional_expenses, summary, status, payment_methods
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING {_SPLIT_BILL_COLUMNS}
                """,
                (
                    owner_id,
                    activity_name,
                    occurred_at,
                    Jsonb([p.to_dict() for p in participants]),
                    Jsonb([e.to_dict() for e in expenses]),
                    Jsonb([e.to_dict() for e in additional_expenses]),
                    Jsonb(summary.to_dict()),
                    status,
                    Jsonb([m.to_dict() for m in payment_methods]),
                ),
            )
            row = cur.fetchone()
            conn.commit()
            return _split_bill_from_row(row)

    def list_split_bills(self, *, owner_id: str) -> list[SplitBillRecord]:
        with self._connect() as conn, conn.cursor() as cur:
            cur.execute(
                f"""
                SELECT {_SPLIT_BILL_COLUMNS}
                FROM split_bills
                WHERE owner_id = %s
                ORDER BY occurred_at DESC, created_at DESC
                """,
                (owner_id,),
            )
            return [_split_bill_from_row(row) for row in cur.fetchall()]

    def get_split_bill(self, *, owner_id: str, record_id: str) -> Optional[SplitBillRecord]:
        with self._connect() as conn, conn.cursor() as cur:
            cur.execute(
                f"""
                SELECT {_SPLIT_BILL_COLUMNS}
                FROM split_bills
                WHERE owner_id = %s AND id = %s
                """,
                (owner_id, record_id),
            )
            row = cur.fetchone()
            return _split_bill_from_row(row) if row is not None else None
