"""Persistence: profile JSON, history and discomfort JSONL."""
