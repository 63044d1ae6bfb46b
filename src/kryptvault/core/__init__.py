"""Core package of KryptVault: envelope engine, sharing and file wrappers."""
