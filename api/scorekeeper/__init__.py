"""Rinkside scorekeeper API: live roller-hockey game events and statistics."""
