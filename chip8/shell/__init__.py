"""Host-side services that do not need an open window."""
