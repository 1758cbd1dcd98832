"""
Services: bookings (local cache + merge), remote (entity API gateway),
capture (confirmation watcher), analytics (visit buckets), identity (admin gate).
"""
