"""Core diff engine, hunk grouping and revision handling."""
