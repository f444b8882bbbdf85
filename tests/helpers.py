"""Shared helpers for seeding the test database."""

import asyncio

from conference_api.app.schemas.registration import RegistrationCreate


def run(coro):
    return asyncio.run(coro)


def make_session(db, capacity=None, status="published", date="2026-05-01", start_time="09:00", title="Keynote"):
    with db.cursor() as cursor:
        cursor.execute(
            "INSERT INTO sessions (title, date, start_time, capacity, status) VALUES (?, ?, ?, ?, ?)",
            (title, date, start_time, capacity, status),
        )
        return cursor.lastrowid


def make_activity(db, capacity=None, status="active", date="2026-05-01", time="18:00", name="City tour"):
    with db.cursor() as cursor:
        cursor.execute(
            "INSERT INTO activities (name, date, time, capacity, status) VALUES (?, ?, ?, ?, ?)",
            (name, date, time, capacity, status),
        )
        return cursor.lastrowid


def form(email, first_name="Ada", last_name="Lovelace", registration_type="academic", **extra):
    data = {
        "firstName": first_name,
        "lastName": last_name,
        "email": email,
        "registrationType": registration_type,
    }
    data.update(extra)
    return data


def make_registration(registrations, email, **kwargs):
    created = run(registrations.submit_registration(RegistrationCreate.model_validate(form(email, **kwargs))))
    return created["id"]


def counter(db, table, parent_id):
    with db.cursor() as cursor:
        return cursor.execute(
            f"SELECT current_registrations FROM {table} WHERE id = ?", (parent_id,)
        ).fetchone()[0]


def registered_rows(db, join_table, fk_column, parent_id):
    with db.cursor() as cursor:
        return cursor.execute(
            f"SELECT COUNT(*) FROM {join_table} WHERE {fk_column} = ? AND status = 'registered'",
            (parent_id,),
        ).fetchone()[0]
