"""Reelview - headless view-model service for a social video client."""
