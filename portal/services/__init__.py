"""Storage and business logic; route handlers stay thin."""
