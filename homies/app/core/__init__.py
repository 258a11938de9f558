"""Configuration, logging and database helpers shared by all services."""
