from django.db import migrations

OVERLAP_MESSAGE = "Room is already booked for these dates."

POSTGRES_FORWARD = [
    f"""
    CREATE OR REPLACE FUNCTION bookings_booking_check_overlap() RETURNS trigger AS $$
    BEGIN
        IF NEW.status = 'confirmed' THEN
            -- Row lock on the room serializes confirmations for the same room.
            PERFORM 1 FROM hotels_room WHERE id = NEW.room_id FOR UPDATE;
            IF EXISTS (
                SELECT 1 FROM bookings_booking
                WHERE room_id = NEW.room_id
                  AND id <> NEW.id
                  AND status = 'confirmed'
                  AND check_in < NEW.check_out
                  AND check_out > NEW.check_in
            ) THEN
                RAISE EXCEPTION '{OVERLAP_MESSAGE}' USING ERRCODE = 'exclusion_violation';
            END IF;
        END IF;
        RETURN NEW;
    END;
    $$ LANGUAGE plpgsql;
    """,
    """
    CREATE TRIGGER bookings_booking_overlap
    BEFORE INSERT OR UPDATE ON bookings_booking
    FOR EACH ROW EXECUTE FUNCTION bookings_booking_check_overlap();
    """,
]

POSTGRES_REVERSE = [
    "DROP TRIGGER IF EXISTS bookings_booking_overlap ON bookings_booking;",
    "DROP FUNCTION IF EXISTS bookings_booking_check_overlap();",
]

SQLITE_TRIGGER = """
CREATE TRIGGER bookings_booking_overlap_{event_name}
BEFORE {event} ON bookings_booking
FOR EACH ROW WHEN NEW.status = 'confirmed'
BEGIN
    SELECT RAISE(ABORT, '{message}')
    WHERE EXISTS (
        SELECT 1 FROM bookings_booking
        WHERE room_id = NEW.room_id
          AND id IS NOT NEW.id
          AND status = 'confirmed'
          AND check_in < NEW.check_out
          AND check_out > NEW.check_in
    );
END;
"""

SQLITE_FORWARD = [
    SQLITE_TRIGGER.format(event_name="insert", event="INSERT", message=OVERLAP_MESSAGE),
    SQLITE_TRIGGER.format(event_name="update", event="UPDATE", message=OVERLAP_MESSAGE),
]

SQLITE_REVERSE = [
    "DROP TRIGGER IF EXISTS bookings_booking_overlap_insert;",
    "DROP TRIGGER IF EXISTS bookings_booking_overlap_update;",
]


def _run(schema_editor, statements_by_vendor):
    statements = statements_by_vendor.get(schema_editor.connection.vendor)
    if statements is None:
        raise NotImplementedError(
            f"No booking overlap trigger for database vendor {schema_editor.connection.vendor!r}."
        )
    for statement in statements:
        schema_editor.execute(statement, params=None)


def create_overlap_triggers(apps, schema_editor):
    _run(schema_editor, {"postgresql": POSTGRES_FORWARD, "sqlite": SQLITE_FORWARD})


def drop_overlap_triggers(apps, schema_editor):
    _run(schema_editor, {"postgresql": POSTGRES_REVERSE, "sqlite": SQLITE_REVERSE})


class Migration(migrations.Migration):

    dependencies = [
        ("bookings", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(create_overlap_triggers, drop_overlap_triggers),
    ]
