"""PostgreSQL-optimized search indexes for project search.

This migration is a no-op on non-PostgreSQL databases (e.g., SQLite).

Indexes added (Postgres only):
- Trigram GIN indexes for fast ILIKE/contains search on title/description
- Full-text GIN index on a combined tsvector of title + description

These are created with CONCURRENTLY to minimize locking.
"""

from __future__ import annotations

from django.db import migrations


def _is_postgres(schema_editor) -> bool:
    return getattr(schema_editor.connection, "vendor", None) == "postgresql"


def _has_extension(cursor, extname: str) -> bool:
    cursor.execute("SELECT 1 FROM pg_extension WHERE extname = %s", [extname])
    return cursor.fetchone() is not None


def forwards(apps, schema_editor):
    if not _is_postgres(schema_editor):
        return

    connection = schema_editor.connection
    with connection.cursor() as cursor:
        has_trgm = _has_extension(cursor, "pg_trgm")
        if not has_trgm:
            # Managed databases may refuse CREATE EXTENSION; the FTS index is still created.
            try:
                cursor.execute("CREATE EXTENSION IF NOT EXISTS pg_trgm")
                has_trgm = True
            except Exception:
                has_trgm = False

        if has_trgm:
            cursor.execute(
                """
                CREATE INDEX CONCURRENTLY IF NOT EXISTS projects_project_title_trgm_gin
                ON projects_project
                USING GIN (title gin_trgm_ops)
                """.strip()
            )
            cursor.execute(
                """
                CREATE INDEX CONCURRENTLY IF NOT EXISTS projects_project_desc_trgm_gin
                ON projects_project
                USING GIN (description gin_trgm_ops)
                """.strip()
            )

        cursor.execute(
            """
            CREATE INDEX CONCURRENTLY IF NOT EXISTS projects_project_fts_gin
            ON projects_project
            USING GIN (
                to_tsvector(
                    'simple',
                    coalesce(title, '') || ' ' || coalesce(description, '')
                )
            )
            """.strip()
        )


def backwards(apps, schema_editor):
    if not _is_postgres(schema_editor):
        return

    connection = schema_editor.connection
    with connection.cursor() as cursor:
        cursor.execute("DROP INDEX CONCURRENTLY IF EXISTS projects_project_fts_gin")
        cursor.execute("DROP INDEX CONCURRENTLY IF EXISTS projects_project_desc_trgm_gin")
        cursor.execute("DROP INDEX CONCURRENTLY IF EXISTS projects_project_title_trgm_gin")


class Migration(migrations.Migration):
    atomic = False

    dependencies = [
        ("projects", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(forwards, backwards),
    ]
