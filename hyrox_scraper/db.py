"""
PostgreSQL storage for athlete records (psycopg2).
Tables: athletes, events, scrape_runs. See schema.sql.
"""
import os
from datetime import datetime

import psycopg2

from .models import AthleteRecord, CanonicalEvent


def get_db(url: str | None = None):
    url = url or os.environ.get("DATABASE_URL")
    if not url:
        raise SystemExit("DATABASE_URL is not set")
    return psycopg2.connect(url)


def start_run(conn, roster_url: str | None = None):
    with conn.cursor() as cur:
        cur.execute(
            "INSERT INTO scrape_runs (started_at, status, roster_url) VALUES (%s, 'running', %s) RETURNING id",
            (datetime.utcnow(), roster_url),
        )
        run_id = cur.fetchone()[0]
    conn.commit()
    return run_id


def finish_run(conn, run_id, status, athletes_processed, error_message=None):
    with conn.cursor() as cur:
        cur.execute(
            """UPDATE scrape_runs SET finished_at = %s, status = %s, athletes_processed = %s, error_message = %s
               WHERE id = %s""",
            (datetime.utcnow(), status, athletes_processed, error_message, run_id),
        )
    conn.commit()


def upsert_athlete_records(conn, records) -> int:
    """Insert or update athletes by (name, year) and replace their events. Returns count."""
    if not records:
        return 0
    saved = 0
    with conn.cursor() as cur:
        for record in records:
            cur.execute(
                """INSERT INTO athletes (name, category, total_time, ranking, year, location, external_id, updated_at)
                   VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                   ON CONFLICT (name, year) DO UPDATE SET
                     category = EXCLUDED.category, total_time = EXCLUDED.total_time,
                     ranking = EXCLUDED.ranking, location = EXCLUDED.location,
                     external_id = EXCLUDED.external_id, updated_at = EXCLUDED.updated_at
                   RETURNING id""",
                (
                    record.name,
                    record.category,
                    record.total_time_seconds,
                    record.ranking,
                    record.year,
                    record.location,
                    record.external_id,
                    datetime.utcnow(),
                ),
            )
            row = cur.fetchone()
            if not row:
                continue
            athlete_id = row[0]
            cur.execute("DELETE FROM events WHERE athlete_id = %s", (athlete_id,))
            for event in record.events:
                cur.execute(
                    """INSERT INTO events (athlete_id, name, duration, order_index, split_time)
                       VALUES (%s, %s, %s, %s, %s)""",
                    (athlete_id, event.name, event.duration_seconds, event.order_index, event.split_time_seconds),
                )
            saved += 1
    conn.commit()
    return saved


def load_athlete_records(conn) -> list[AthleteRecord]:
    """All stored athletes with their events, ordered by id then order_index."""
    with conn.cursor() as cur:
        cur.execute(
            """SELECT a.id, a.name, a.category, a.total_time, a.ranking, a.year, a.location, a.external_id,
                      e.name, e.duration, e.order_index, e.split_time
               FROM athletes a
               LEFT JOIN events e ON a.id = e.athlete_id
               ORDER BY a.id, e.order_index"""
        )
        rows = cur.fetchall()

    by_id = {}
    for (athlete_id, name, category, total, ranking, year, location, external_id,
         event_name, duration, order_index, split_time) in rows:
        record = by_id.get(athlete_id)
        if record is None:
            record = AthleteRecord(
                id=athlete_id,
                name=name,
                category=category,
                total_time_seconds=float(total) if total is not None else 0.0,
                ranking=ranking,
                year=year,
                location=location,
                external_id=external_id,
            )
            by_id[athlete_id] = record
        if event_name is not None:
            record.events.append(
                CanonicalEvent(
                    name=event_name,
                    duration_seconds=float(duration),
                    order_index=order_index,
                    split_time_seconds=float(split_time) if split_time is not None else 0.0,
                )
            )
    return list(by_id.values())


def get_stats(conn) -> dict:
    """Athlete counts by category and the latest update time."""
    with conn.cursor() as cur:
        cur.execute(
            """SELECT COUNT(*),
                      COUNT(*) FILTER (WHERE category = 'men'),
                      COUNT(*) FILTER (WHERE category = 'women'),
                      MAX(updated_at)
               FROM athletes"""
        )
        row = cur.fetchone() or (0, 0, 0, None)
    total, men, women, last_update = row
    return {
        "total_athletes": total or 0,
        "men_count": men or 0,
        "women_count": women or 0,
        "last_update": last_update,
    }
