"""
Infrastructure layer package for the Plant Sightings service.
Provides database connections, photo storage and external API clients.
"""
