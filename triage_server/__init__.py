"""HTTP surface for the photo triage review queue."""
