"""HTTP interface for Form Pilot."""
