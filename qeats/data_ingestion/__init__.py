"""
Restaurant data ingestion package.

Responsibilities:
- Read raw restaurant and menu dumps.
- Normalize them into the schema the restaurant data store reads.
- Persist restaurants, menus and items as processed JSON files.
"""
