"""Core infrastructure: settings, logging, datastore and errors."""
