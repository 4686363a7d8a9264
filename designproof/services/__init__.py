"""Services: diff handling, validation, collaborators and orchestration."""
