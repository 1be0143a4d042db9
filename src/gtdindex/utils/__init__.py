"""Small shared helpers for gtdindex."""
