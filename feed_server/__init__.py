"""HTTP service for the Looped scorecard and photo pipeline."""
