"""Query Minecraft, Mindustry, Savage 2 and Eco servers for their status."""

__version__ = "0.1.0"