"""PantryPal household inventory tools."""
