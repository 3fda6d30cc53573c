"""Candidate search building blocks: normalizers, age translation and filters."""
