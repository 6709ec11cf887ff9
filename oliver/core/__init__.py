"""Pure view logic shared by the services and the HTTP layer."""
