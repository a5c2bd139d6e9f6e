"""Front-end services: exam flow, admin workflows and certificates."""
