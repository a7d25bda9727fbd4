"""Small helpers shared by the service layer."""
