"""Identity infrastructure: ORM model, repositories and token/password security."""
