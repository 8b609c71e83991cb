"""HTTP routes for the Lessonbook API."""
