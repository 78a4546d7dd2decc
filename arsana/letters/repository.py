"""
Letter Repository - create/read operations for the two letter tables.

Follows the database patterns in arsana/infrastructure/database.py.
"""

from __future__ import annotations

import uuid

from arsana.infrastructure.database import db_transaction, get_db_connection, retry_on_db_lock
from arsana.letters.models import Letter, LetterCreate, LetterKind
from arsana.observability.logging import get_logger
from arsana.utils.dates import to_db_timestamp, utc_now

logger = get_logger(__name__)


class LetterRepository:
    """
    Repository for one letter table.

    Letter CRUD endpoints live outside this service; this repository covers
    what seeding, tests and the invitation workflow need.
    """

    def __init__(self, kind: LetterKind) -> None:
        self.kind = kind

    @retry_on_db_lock()
    def create(self, letter: LetterCreate) -> Letter:
        """
        Store a new letter.

        Side Effects:
            - Inserts row into incoming_letters / outgoing_letters
            - Commits transaction
        """
        now = utc_now()
        record = Letter(
            id=str(uuid.uuid4()),
            kind=self.kind,
            letter_number=letter.letter_number,
            subject=letter.subject,
            sender=letter.sender,
            recipient=letter.recipient,
            processor=letter.processor,
            letter_date=letter.letter_date,
            note=letter.note,
            description=letter.description if self.kind == LetterKind.OUTGOING else None,
            is_invitation=letter.is_invitation,
            event_date=letter.event_date,
            event_time=letter.event_time,
            event_location=letter.event_location,
            event_notes=letter.event_notes,
            user_id=letter.user_id,
            created_at=letter.created_at or now,
            updated_at=now,
        )

        db_dict = record.to_db_dict()
        columns = ", ".join(db_dict)
        placeholders = ", ".join(f":{name}" for name in db_dict)

        with db_transaction() as conn:
            conn.execute(
                f"INSERT INTO {self.kind.table} ({columns}) VALUES ({placeholders})",
                db_dict,
            )

        logger.info("Created %s letter %s (%s)", self.kind.value, record.id, record.letter_number)
        return record

    def get_by_id(self, letter_id: str) -> Letter | None:
        with get_db_connection() as conn:
            row = conn.execute(
                f"SELECT * FROM {self.kind.table} WHERE id = ?",
                (letter_id,),
            ).fetchone()

        if not row:
            return None

        return Letter.from_db_row(dict(row), self.kind)

    @retry_on_db_lock()
    def mark_event_handled(self, letter_id: str) -> Letter | None:
        """
        Flag an invitation as handled so the overdue check skips it.

        Returns:
            Updated Letter, or None if not found
        """
        now = to_db_timestamp(utc_now())

        with db_transaction() as conn:
            cursor = conn.execute(
                f"""
                UPDATE {self.kind.table}
                SET event_handled_at = ?, updated_at = ?
                WHERE id = ? AND is_invitation = 1
                """,
                (now, now, letter_id),
            )
            if cursor.rowcount == 0:
                return None

        logger.info("Marked %s invitation %s as handled", self.kind.value, letter_id)
        return self.get_by_id(letter_id)
