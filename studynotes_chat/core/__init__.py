"""Core configuration, auth, errors, logging and database setup."""
