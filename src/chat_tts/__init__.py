"""Read chat messages aloud through a text-to-speech service and a local player."""
