"""Core building blocks shared by every layer (errors, results)."""
