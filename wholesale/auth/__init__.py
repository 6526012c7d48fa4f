"""Identity: users, companies and the session login used by the order API."""
