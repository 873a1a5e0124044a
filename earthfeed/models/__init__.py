"""Domain models for the acquisition engine.

- feed: sources, cache entries, attempts, session state, enums
- events: typed events for the controller's inbound queue
- epic: pydantic EPIC records and the image render result
"""
