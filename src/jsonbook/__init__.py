"""Normalize FictionBook 2 documents into a canonical JSON book tree."""
