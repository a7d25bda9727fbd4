"""Configuration, logging and database plumbing shared by the application."""
