"""Live wedding-day timeline service."""
