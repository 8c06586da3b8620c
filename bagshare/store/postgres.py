"""
PostgreSQL MarketStore
======================
psycopg2-backed repository. Schema lives in migrations/001_bagshare_schema.sql
and is applied by scripts/run_migrations.py.

Concurrency guarantees come from the database:
- UNIQUE (traveler_listing_id, sender_listing_id) + ON CONFLICT DO NOTHING
- single-statement UPDATE ... WHERE <expectations> RETURNING * for lifecycle
  transitions
"""

import logging
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

import psycopg2
from psycopg2.extras import RealDictCursor

from bagshare.shared.errors import DuplicateMatch, ValidationFailed
from .base import MarketStore, check_match_fields
from .models import IssueReport, Match, SenderListing, TravelerListing, User

logger = logging.getLogger(__name__)


def _is_uuid(value: Any) -> bool:
    """Ids are UUID columns; anything else can never match a row."""
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


def _status_value(value: Any) -> Any:
    return value.value if hasattr(value, "value") else value


class PostgresStore(MarketStore):

    def __init__(self, database_url: str):
        self._database_url = database_url

    @contextmanager
    def _cursor(self) -> Iterator[RealDictCursor]:
        """One connection + transaction per call. Commits on success."""
        conn = psycopg2.connect(self._database_url, cursor_factory=RealDictCursor)
        try:
            with conn.cursor() as cur:
                yield cur
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _fetch_one(self, sql: str, params: tuple) -> Optional[dict]:
        with self._cursor() as cur:
            cur.execute(sql, params)
            row = cur.fetchone()
            return dict(row) if row else None

    def _fetch_all(self, sql: str, params: tuple) -> List[dict]:
        with self._cursor() as cur:
            cur.execute(sql, params)
            return [dict(row) for row in cur.fetchall()]

    # ----- users -----

    def add_user(self, user: User) -> User:
        try:
            row = self._fetch_one("""
                INSERT INTO users (id, email, name, phone, password_hash)
                VALUES (%s, %s, %s, %s, %s)
                RETURNING id, email, name, phone, password_hash
            """, (user.id, user.email.strip().lower(), user.name, user.phone, user.password_hash))
        except psycopg2.IntegrityError:
            raise ValidationFailed("User already exists")
        return User(**row)

    def get_user(self, user_id: str) -> Optional[User]:
        if not _is_uuid(user_id):
            return None
        row = self._fetch_one(
            "SELECT id, email, name, phone, password_hash FROM users WHERE id = %s",
            (user_id,),
        )
        return User(**row) if row else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        row = self._fetch_one(
            "SELECT id, email, name, phone, password_hash FROM users WHERE LOWER(email) = %s",
            (email.strip().lower(),),
        )
        return User(**row) if row else None

    # ----- traveler listings -----

    def add_traveler_listing(self, listing: TravelerListing) -> TravelerListing:
        row = self._fetch_one("""
            INSERT INTO traveler_listings
            (id, user_id, origin_airport, destination_airport, flight_number,
             departure_time, arrival_time, available_weight, is_active, created_at)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING *
        """, (
            listing.id,
            listing.user_id,
            listing.origin_airport,
            listing.destination_airport,
            listing.flight_number,
            listing.departure_time,
            listing.arrival_time,
            listing.available_weight,
            listing.is_active,
            listing.created_at,
        ))
        return TravelerListing(**row)

    def get_traveler_listing(self, listing_id: str) -> Optional[TravelerListing]:
        if not _is_uuid(listing_id):
            return None
        row = self._fetch_one("SELECT * FROM traveler_listings WHERE id = %s", (listing_id,))
        return TravelerListing(**row) if row else None

    def list_traveler_listings_for_user(self, user_id: str) -> List[TravelerListing]:
        if not _is_uuid(user_id):
            return []
        rows = self._fetch_all("""
            SELECT * FROM traveler_listings
            WHERE user_id = %s
            ORDER BY departure_time ASC
        """, (user_id,))
        return [TravelerListing(**row) for row in rows]

    def find_traveler_listings(
        self,
        origin_airport: Optional[str] = None,
        destination_airport: Optional[str] = None,
        min_available_weight: Optional[float] = None,
        exclude_user_id: Optional[str] = None,
        departs_on_or_after: Optional[datetime] = None,
        active_only: bool = True,
    ) -> List[TravelerListing]:
        clauses = ["TRUE"]
        params: List[Any] = []
        if active_only:
            clauses.append("is_active = TRUE")
        if origin_airport:
            clauses.append("origin_airport = %s")
            params.append(origin_airport)
        if destination_airport:
            clauses.append("destination_airport = %s")
            params.append(destination_airport)
        if min_available_weight is not None:
            clauses.append("available_weight >= %s")
            params.append(min_available_weight)
        if exclude_user_id and _is_uuid(exclude_user_id):
            clauses.append("user_id <> %s")
            params.append(exclude_user_id)
        if departs_on_or_after is not None:
            clauses.append("departure_time >= %s")
            params.append(departs_on_or_after)

        rows = self._fetch_all(
            f"SELECT * FROM traveler_listings WHERE {' AND '.join(clauses)} "
            "ORDER BY departure_time ASC",
            tuple(params),
        )
        return [TravelerListing(**row) for row in rows]

    # ----- sender listings -----

    def add_sender_listing(self, listing: SenderListing) -> SenderListing:
        row = self._fetch_one("""
            INSERT INTO sender_listings
            (id, user_id, receiver_id, receiver_email, origin_airport, destination_airport,
             package_weight, package_type, description, is_active, created_at)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING *
        """, (
            listing.id,
            listing.user_id,
            listing.receiver_id,
            listing.receiver_email,
            listing.origin_airport,
            listing.destination_airport,
            listing.package_weight,
            listing.package_type.value,
            listing.description,
            listing.is_active,
            listing.created_at,
        ))
        return SenderListing(**row)

    def get_sender_listing(self, listing_id: str) -> Optional[SenderListing]:
        if not _is_uuid(listing_id):
            return None
        row = self._fetch_one("SELECT * FROM sender_listings WHERE id = %s", (listing_id,))
        return SenderListing(**row) if row else None

    def list_sender_listings_for_user(self, user_id: str) -> List[SenderListing]:
        if not _is_uuid(user_id):
            return []
        rows = self._fetch_all("""
            SELECT * FROM sender_listings
            WHERE user_id = %s
            ORDER BY created_at DESC
        """, (user_id,))
        return [SenderListing(**row) for row in rows]

    def find_sender_listings(
        self,
        origin_airport: Optional[str] = None,
        destination_airport: Optional[str] = None,
        max_package_weight: Optional[float] = None,
        exclude_user_id: Optional[str] = None,
        created_on_or_before: Optional[datetime] = None,
        active_only: bool = True,
    ) -> List[SenderListing]:
        clauses = ["TRUE"]
        params: List[Any] = []
        if active_only:
            clauses.append("is_active = TRUE")
        if origin_airport:
            clauses.append("origin_airport = %s")
            params.append(origin_airport)
        if destination_airport:
            clauses.append("destination_airport = %s")
            params.append(destination_airport)
        if max_package_weight is not None:
            clauses.append("package_weight <= %s")
            params.append(max_package_weight)
        if exclude_user_id and _is_uuid(exclude_user_id):
            clauses.append("user_id <> %s")
            params.append(exclude_user_id)
        if created_on_or_before is not None:
            clauses.append("created_at <= %s")
            params.append(created_on_or_before)

        rows = self._fetch_all(
            f"SELECT * FROM sender_listings WHERE {' AND '.join(clauses)} "
            "ORDER BY created_at DESC",
            tuple(params),
        )
        return [SenderListing(**row) for row in rows]

    # ----- matches -----

    def insert_match(self, match: Match) -> Match:
        row = self._fetch_one("""
            INSERT INTO matches
            (id, traveler_listing_id, sender_listing_id, traveler_id, sender_id,
             receiver_id, status, created_at, updated_at)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
            ON CONFLICT ON CONSTRAINT uq_matches_listing_pair DO NOTHING
            RETURNING *
        """, (
            match.id,
            match.traveler_listing_id,
            match.sender_listing_id,
            match.traveler_id,
            match.sender_id,
            match.receiver_id,
            _status_value(match.status),
            match.created_at,
            match.updated_at,
        ))
        if row is None:
            raise DuplicateMatch(
                f"Match already exists for traveler listing {match.traveler_listing_id} "
                f"and sender listing {match.sender_listing_id}"
            )
        return Match(**row)

    def get_match(self, match_id: str) -> Optional[Match]:
        if not _is_uuid(match_id):
            return None
        row = self._fetch_one("SELECT * FROM matches WHERE id = %s", (match_id,))
        return Match(**row) if row else None

    def get_match_for_pair(
        self, traveler_listing_id: str, sender_listing_id: str
    ) -> Optional[Match]:
        row = self._fetch_one("""
            SELECT * FROM matches
            WHERE traveler_listing_id = %s AND sender_listing_id = %s
        """, (traveler_listing_id, sender_listing_id))
        return Match(**row) if row else None

    def list_matches_for_user(
        self, user_id: str, include_completed: bool = False
    ) -> List[Match]:
        if not _is_uuid(user_id):
            return []
        sql = """
            SELECT * FROM matches
            WHERE (traveler_id = %s OR sender_id = %s OR receiver_id = %s)
        """
        if not include_completed:
            sql += " AND status <> 'completed'"
        sql += " ORDER BY created_at DESC"
        rows = self._fetch_all(sql, (user_id, user_id, user_id))
        return [Match(**row) for row in rows]

    def update_match_if(
        self,
        match_id: str,
        expected: Dict[str, Any],
        changes: Dict[str, Any],
    ) -> Optional[Match]:
        check_match_fields(expected)
        check_match_fields(changes)
        if not _is_uuid(match_id):
            return None

        # Column names come from MATCH_MUTABLE_FIELDS only
        set_sql = ", ".join(f"{column} = %s" for column in changes)
        where_sql = " AND ".join(["id = %s"] + [f"{column} = %s" for column in expected])
        params = (
            [_status_value(v) for v in changes.values()]
            + [match_id]
            + [_status_value(v) for v in expected.values()]
        )
        row = self._fetch_one(
            f"UPDATE matches SET {set_sql}, updated_at = NOW() "
            f"WHERE {where_sql} RETURNING *",
            tuple(params),
        )
        return Match(**row) if row else None

    # ----- issue reports -----

    def add_issue_report(self, report: IssueReport) -> IssueReport:
        row = self._fetch_one("""
            INSERT INTO issue_reports (id, match_id, reported_by_id, description, created_at)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING *
        """, (report.id, report.match_id, report.reported_by_id, report.description, report.created_at))
        return IssueReport(**row)

    def list_issue_reports(self, match_id: str) -> List[IssueReport]:
        if not _is_uuid(match_id):
            return []
        rows = self._fetch_all("""
            SELECT * FROM issue_reports
            WHERE match_id = %s
            ORDER BY created_at ASC
        """, (match_id,))
        return [IssueReport(**row) for row in rows]

    # ----- health -----

    def ping(self) -> bool:
        try:
            with self._cursor() as cur:
                cur.execute("SELECT 1")
            return True
        except psycopg2.Error as e:
            logger.error(f"Database ping failed: {e}")
            return False
