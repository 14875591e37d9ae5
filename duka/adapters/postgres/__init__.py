"""Postgres adapters (psycopg2)."""
