"""Business logic for scorekeeping: ingestion, statistics, schedule and announcer."""
