"""chorecal - recurring chores with on-demand calendar projection."""
