"""Small SQLModel application used as generator input in tests."""
