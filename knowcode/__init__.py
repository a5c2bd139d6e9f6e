"""Know Code Extra web front."""
