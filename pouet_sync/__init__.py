"""Synchronizes the pouet.net data dumps into SQLite and queries them."""

from .api import check_version, gen_csv, get_latest, sql_query

__all__ = ["check_version", "gen_csv", "get_latest", "sql_query"]
