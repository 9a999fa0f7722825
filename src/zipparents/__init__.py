"""
ZipParents - location-based social networking for parents.

Areas:
- Profiles: onboarding, privacy projection, verification
- Discovery: zip-code distance search and ranking
- Community: connections, messaging, events
- Safety: reports, blocks, content filtering, admin moderation
"""

__version__ = "1.0.0"
