"""RA Roulette sync - keeps the weekly achievement document up to date.

This package discovers each week's achievements from the event page, the
forum topic and the event game, enriches them through the RetroAchievements
API, and maintains the JSON document read by the mobile app and widgets.
"""

__version__ = "0.1.0"
