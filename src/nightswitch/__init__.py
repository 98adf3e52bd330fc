"""Day/night desktop theme switching driven by sun times or a manual schedule."""
