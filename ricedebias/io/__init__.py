"""Input/output of NIfTI volumes."""
