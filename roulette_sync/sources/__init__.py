from roulette_sync.sources.base_source import CandidateSource
from roulette_sync.sources.event_game import EventGameSource
from roulette_sync.sources.event_page import EventPageSource
from roulette_sync.sources.forum import ForumSource

__all__ = ["CandidateSource", "EventGameSource", "EventPageSource", "ForumSource"]
