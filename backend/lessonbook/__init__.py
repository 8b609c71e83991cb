"""Lessonbook: booking lifecycle core for a tutoring marketplace."""
