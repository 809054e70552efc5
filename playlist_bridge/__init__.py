"""Webhook-to-Discord bridge for travel playlists."""
