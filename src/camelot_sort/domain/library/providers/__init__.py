"""
Playlist providers.

Each provider is a module of pure functions over a ProviderState.
"""
