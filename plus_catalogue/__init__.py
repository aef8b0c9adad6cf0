"""PlayStation Plus catalogue service."""
