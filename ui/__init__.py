"""Flask screens for the NutriTrack dashboard."""
