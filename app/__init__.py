"""Retail sales explorer: listing, filter catalog and statistics over sales records, plus CSV ingestion."""
