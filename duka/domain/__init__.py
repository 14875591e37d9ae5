"""Domain – models, errors and policies shared by services and adapters."""
